"""Recursive validator for avatar definition documents.

The walker visits every node of a definition depth-first and records each
structural or security problem it finds instead of stopping at the first one,
so a single call returns the complete list of violations. Every leaf string
that can reach the renderer goes through a predicate from
:mod:`avatarguard.tools.security_policy`.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from avatarguard.models.definition import (
    COLOR_GROUP_SHAPE,
    COLOR_REFERENCE_SHAPE,
    ELEMENT_SHAPES,
    META_ENTRY_SHAPE,
    META_SHAPE,
    MIN_DIMENSION,
    OFFSET_SHAPE,
    STYLE_ELEMENT,
    VARIABLE_REFERENCE_SHAPE,
    VOCABULARIES,
    Dialect,
    ObjectShape,
    component_shape,
    dialect_of_key,
    root_shape,
    surface_shape,
    variant_shape,
)
from avatarguard.models.report import ValidationReport, ViolationCode
from avatarguard.models.rules import ATTRIBUTE_POLICIES, TEXT_VARIABLES, AttributePolicy
from avatarguard.tools.accumulator import ViolationCollector, join_pointer
from avatarguard.tools.color_values import (
    describe_color_problem,
    is_color_reference_name,
    is_palette_color,
)
from avatarguard.tools.numbers import check_bounded, check_bounded_or_list, type_name
from avatarguard.tools.security_policy import (
    css_findings,
    is_allowed_element,
    is_event_handler,
    is_namespace_attribute,
    is_reserved_key,
    is_safe_class,
    is_safe_id,
    is_safe_meta_url,
    is_safe_name,
    is_safe_url,
)
from avatarguard.utils.config import MAX_DEPTH_LIMIT, settings

logger = logging.getLogger(__name__)


class DefinitionValidationError(ValueError):
    """Raised by :func:`ensure_valid_definition` when a definition is rejected."""

    def __init__(self, message: str, report: ValidationReport):
        super().__init__(message)
        self.report = report


def _resolve_max_depth(max_depth: Optional[int]) -> int:
    depth = settings.max_depth if max_depth is None else max_depth
    if not 1 <= depth <= MAX_DEPTH_LIMIT:
        raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {depth}")
    return depth


class _DefinitionWalker:
    def __init__(self, max_depth: int, dialect: Dialect = Dialect.BODY) -> None:
        self.max_depth = max_depth
        self.dialect = dialect
        self.errors = ViolationCollector()

    @property
    def vocab(self):
        return VOCABULARIES[self.dialect]

    @property
    def foreign(self):
        return VOCABULARIES[self.dialect.other]

    # -- generic helpers -------------------------------------------------

    def _expect_object(self, value: Any, path: str, label: str) -> bool:
        if isinstance(value, dict):
            return True
        self.errors.add(path, ViolationCode.WRONG_TYPE, f"{label} must be an object, got {type_name(value)}")
        return False

    def _expect_string(self, value: Any, path: str, label: str) -> bool:
        if isinstance(value, str):
            return True
        self.errors.add(path, ViolationCode.WRONG_TYPE, f"{label} must be a string, got {type_name(value)}")
        return False

    def _check_keys(self, obj: dict, shape: ObjectShape, path: str, foreign: Iterable[str] = ()) -> None:
        foreign = set(foreign)
        for key in obj:
            if key in shape.allowed:
                continue
            key_path = join_pointer(path, key)
            if is_reserved_key(key):
                self.errors.add(key_path, ViolationCode.RESERVED_KEY, f"reserved key {key!r}")
            elif key in foreign:
                self.errors.add(
                    key_path,
                    ViolationCode.DIALECT_MIXED,
                    f"{key!r} belongs to the {self.dialect.other.value} dialect; "
                    f"this document uses {self.dialect.value}",
                )
            else:
                self.errors.add(key_path, ViolationCode.UNKNOWN_FIELD, f"unknown field {key!r}")
        for key in sorted(shape.required):
            if key not in obj:
                self.errors.add(join_pointer(path, key), ViolationCode.MISSING_FIELD, f"missing required field {key!r}")

    def _map_key(self, key: Any, path: str, label: str) -> None:
        if is_reserved_key(key):
            self.errors.add(path, ViolationCode.RESERVED_KEY, f"reserved key {key!r} used as {label} name")
        elif not is_safe_name(key):
            self.errors.add(path, ViolationCode.NAME_PATTERN, f"invalid {label} name {key!r}")

    def _dimension(self, obj: dict, key: str, path: str) -> None:
        if key in obj:
            check_bounded(self.errors, obj[key], join_pointer(path, key), low=MIN_DIMENSION, label=key)

    def _css_text(self, value: Any, path: str, label: str) -> None:
        if not self._expect_string(value, path, label):
            return
        findings = css_findings(value)
        if findings:
            self.errors.add(path, ViolationCode.UNSAFE_CSS, f"{label} contains blocked CSS: {', '.join(findings)}")

    # -- document root ---------------------------------------------------

    def _detect_dialect(self, document: dict) -> Dialect:
        for dialect, vocab in VOCABULARIES.items():
            if vocab.surface in document:
                return dialect
        components = document.get("components")
        if isinstance(components, dict):
            for component in components.values():
                if not isinstance(component, dict):
                    continue
                for key in component:
                    found = dialect_of_key(key, "rotation") or dialect_of_key(key, "offset")
                    if found:
                        return found
                variants = component.get("variants")
                if isinstance(variants, dict):
                    for variant in variants.values():
                        if isinstance(variant, dict):
                            for key in variant:
                                found = dialect_of_key(key, "elements")
                                if found:
                                    return found
        return Dialect.BODY

    def document(self, document: Any) -> None:
        if not self._expect_object(document, "", "definition"):
            return
        self.dialect = self._detect_dialect(document)
        vocab = self.vocab
        if not any(v.surface in document for v in VOCABULARIES.values()):
            self.errors.add(
                join_pointer("", vocab.surface),
                ViolationCode.MISSING_FIELD,
                "definition requires a 'body' or a 'canvas' drawing surface",
            )
        self._check_keys(
            {key: value for key, value in document.items() if key != vocab.surface},
            ObjectShape(optional=root_shape(self.dialect).optional),
            "",
            foreign={self.foreign.surface},
        )
        if "meta" in document:
            self.meta(document["meta"], "/meta")
        if "attributes" in document:
            self.attributes(document["attributes"], "/attributes")
        if vocab.surface in document:
            self.surface(document[vocab.surface], join_pointer("", vocab.surface))
        if "components" in document:
            self.components(document["components"], "/components")
        if "colors" in document:
            self.colors(document["colors"], "/colors")

    def surface(self, value: Any, path: str) -> None:
        if not self._expect_object(value, path, self.vocab.surface):
            return
        self._check_keys(value, surface_shape(self.dialect), path, foreign={self.foreign.elements})
        self._dimension(value, "width", path)
        self._dimension(value, "height", path)
        key = self.vocab.elements
        if key in value:
            self.element_list(value[key], join_pointer(path, key), depth=1)

    # -- meta ------------------------------------------------------------

    def meta(self, value: Any, path: str) -> None:
        if not self._expect_object(value, path, "meta"):
            return
        self._check_keys(value, META_SHAPE, path)
        for section in ("license", "creator", "source"):
            if section not in value:
                continue
            entry = value[section]
            entry_path = join_pointer(path, section)
            if not self._expect_object(entry, entry_path, section):
                continue
            self._check_keys(entry, META_ENTRY_SHAPE, entry_path)
            for key in ("name", "text"):
                if key in entry:
                    self._expect_string(entry[key], join_pointer(entry_path, key), key)
            if "url" in entry:
                url_path = join_pointer(entry_path, "url")
                if self._expect_string(entry["url"], url_path, "url") and not is_safe_meta_url(entry["url"]):
                    self.errors.add(
                        url_path,
                        ViolationCode.UNSAFE_URL,
                        f"meta url must be an absolute http(s) URL, got {entry['url']!r}",
                    )

    # -- elements --------------------------------------------------------

    def element_list(self, value: Any, path: str, depth: int) -> None:
        if not isinstance(value, list):
            self.errors.add(path, ViolationCode.WRONG_TYPE, f"element list must be an array, got {type_name(value)}")
            return
        if depth > self.max_depth:
            self.errors.add(
                path,
                ViolationCode.DEPTH_EXCEEDED,
                f"elements nested deeper than {self.max_depth} levels",
            )
            return
        for index, node in enumerate(value):
            self.element(node, join_pointer(path, index), depth)

    def element(self, node: Any, path: str, depth: int = 1) -> None:
        if not self._expect_object(node, path, "element"):
            return
        if "type" not in node:
            self.errors.add(join_pointer(path, "type"), ViolationCode.MISSING_FIELD, "missing required field 'type'")
            return
        node_type = node["type"]
        if not isinstance(node_type, str) or node_type not in ELEMENT_SHAPES:
            self.errors.add(
                join_pointer(path, "type"),
                ViolationCode.INVALID_ENUM,
                f"element type must be one of {sorted(ELEMENT_SHAPES)}, got {node_type!r}",
            )
            return
        self._check_keys(node, ELEMENT_SHAPES[node_type], path)
        if node_type == "element":
            self._svg_element(node, path, depth)
        elif node_type == "text":
            self._text_node(node, path, depth)
        else:
            self._component_node(node, path)

    def _svg_element(self, node: dict, path: str, depth: int) -> None:
        name = node.get("name")
        if "name" in node and self._expect_string(name, join_pointer(path, "name"), "name"):
            if not is_allowed_element(name):
                self.errors.add(
                    join_pointer(path, "name"),
                    ViolationCode.DISALLOWED_ELEMENT,
                    f"element <{name}> is not allowed",
                )
        if "attributes" in node:
            self.attributes(node["attributes"], join_pointer(path, "attributes"))
        if "value" in node:
            value_path = join_pointer(path, "value")
            if name == STYLE_ELEMENT:
                self._css_text(node["value"], value_path, "style element")
            else:
                self.errors.add(value_path, ViolationCode.UNKNOWN_FIELD, "'value' is only allowed on <style> elements")
        if "children" in node:
            self.element_list(node["children"], join_pointer(path, "children"), depth + 1)

    def _text_node(self, node: dict, path: str, depth: int) -> None:
        if "value" in node:
            value = node["value"]
            value_path = join_pointer(path, "value")
            if isinstance(value, dict):
                self._variable_reference(value, value_path)
            elif not isinstance(value, str):
                self.errors.add(
                    value_path,
                    ViolationCode.WRONG_TYPE,
                    f"text value must be a string or a variable reference, got {type_name(value)}",
                )
        if "children" in node:
            self.element_list(node["children"], join_pointer(path, "children"), depth + 1)

    def _variable_reference(self, value: dict, path: str) -> None:
        self._check_keys(value, VARIABLE_REFERENCE_SHAPE, path)
        if "type" in value and value["type"] != "variable":
            self.errors.add(join_pointer(path, "type"), ViolationCode.INVALID_ENUM, "reference type must be 'variable'")
        if "value" in value:
            name_path = join_pointer(path, "value")
            name = value["value"]
            if self._expect_string(name, name_path, "variable name") and name not in TEXT_VARIABLES:
                self.errors.add(
                    name_path,
                    ViolationCode.UNKNOWN_VARIABLE,
                    f"unknown variable {name!r}; expected one of {sorted(TEXT_VARIABLES)}",
                )

    def _component_node(self, node: dict, path: str) -> None:
        if "value" in node:
            value_path = join_pointer(path, "value")
            if self._expect_string(node["value"], value_path, "component reference") and not is_safe_name(node["value"]):
                self.errors.add(value_path, ViolationCode.NAME_PATTERN, f"invalid component name {node['value']!r}")

    # -- attributes ------------------------------------------------------

    def attributes(self, value: Any, path: str) -> None:
        if not self._expect_object(value, path, "attributes"):
            return
        for key, attr_value in value.items():
            key_path = join_pointer(path, key)
            if not isinstance(key, str):
                self.errors.add(key_path, ViolationCode.WRONG_TYPE, "attribute names must be strings")
            elif is_reserved_key(key):
                self.errors.add(key_path, ViolationCode.RESERVED_KEY, f"reserved key {key!r} used as attribute name")
            elif is_event_handler(key):
                self.errors.add(key_path, ViolationCode.EVENT_HANDLER, f"event handler attribute {key!r}")
            elif is_namespace_attribute(key):
                self.errors.add(key_path, ViolationCode.NAMESPACE_ATTRIBUTE, f"namespaced attribute {key!r}")
            elif key not in ATTRIBUTE_POLICIES:
                self.errors.add(key_path, ViolationCode.DISALLOWED_ATTRIBUTE, f"attribute {key!r} is not allowed")
            else:
                self._attribute_value(ATTRIBUTE_POLICIES[key], key, attr_value, key_path)

    def _attribute_value(self, policy: AttributePolicy, key: str, value: Any, path: str) -> None:
        if policy is AttributePolicy.COLOR:
            self.color_attribute(value, path)
            return
        if policy is AttributePolicy.PAINT:
            if isinstance(value, str) and "url" in value.lower():
                self._css_text(value, path, key)
            else:
                self.color_attribute(value, path)
            return
        if not self._expect_string(value, path, key):
            return
        if policy is AttributePolicy.URL:
            if not is_safe_url(value):
                self.errors.add(
                    path,
                    ViolationCode.UNSAFE_URL,
                    f"{key} must be a local #reference or a base64 PNG/JPEG data URI",
                )
        elif policy is AttributePolicy.ID:
            if not is_safe_id(value):
                self.errors.add(path, ViolationCode.UNSAFE_VALUE, f"id {value!r} is not a safe identifier")
        elif policy is AttributePolicy.CLASS:
            if not is_safe_class(value):
                self.errors.add(path, ViolationCode.UNSAFE_VALUE, f"class {value!r} is not a list of safe names")
        else:
            self._css_text(value, path, key)

    def color_attribute(self, value: Any, path: str) -> None:
        if isinstance(value, dict):
            self._check_keys(value, COLOR_REFERENCE_SHAPE, path)
            if "type" in value and value["type"] != "color":
                self.errors.add(join_pointer(path, "type"), ViolationCode.INVALID_ENUM, "reference type must be 'color'")
            if "value" in value:
                name_path = join_pointer(path, "value")
                name = value["value"]
                if self._expect_string(name, name_path, "color name") and not is_color_reference_name(name):
                    self.errors.add(name_path, ViolationCode.NAME_PATTERN, f"invalid color reference {name!r}")
            return
        problem = describe_color_problem(value)
        if problem is None:
            return
        code = ViolationCode.INVALID_COLOR if isinstance(value, str) else ViolationCode.WRONG_TYPE
        self.errors.add(path, code, problem)

    # -- colors ----------------------------------------------------------

    def colors(self, value: Any, path: str) -> None:
        if not self._expect_object(value, path, "colors"):
            return
        for group_name, group in value.items():
            group_path = join_pointer(path, group_name)
            self._map_key(group_name, group_path, "color group")
            if not self._expect_object(group, group_path, "color group"):
                continue
            self._check_keys(group, COLOR_GROUP_SHAPE, group_path)
            if "values" in group:
                self._palette(group["values"], join_pointer(group_path, "values"))
            if "notEqualTo" in group:
                names_path = join_pointer(group_path, "notEqualTo")
                names = group["notEqualTo"]
                if not isinstance(names, list):
                    self.errors.add(names_path, ViolationCode.WRONG_TYPE, f"notEqualTo must be an array, got {type_name(names)}")
                else:
                    for index, name in enumerate(names):
                        self._name_reference(name, join_pointer(names_path, index), "color group")
            if "contrastTo" in group:
                self._name_reference(group["contrastTo"], join_pointer(group_path, "contrastTo"), "color group")

    def _palette(self, values: Any, path: str) -> None:
        if not isinstance(values, list):
            self.errors.add(path, ViolationCode.WRONG_TYPE, f"values must be an array, got {type_name(values)}")
            return
        if not values and self.dialect is Dialect.BODY:
            self.errors.add(path, ViolationCode.ARITY, "a color group needs at least one value")
        for index, item in enumerate(values):
            item_path = join_pointer(path, index)
            if self._expect_string(item, item_path, "color") and not is_palette_color(item):
                self.errors.add(item_path, ViolationCode.INVALID_COLOR, f"palette colors must be #-prefixed hex, got {item!r}")

    def _name_reference(self, value: Any, path: str, label: str) -> None:
        if not self._expect_string(value, path, f"{label} reference"):
            return
        if is_reserved_key(value):
            self.errors.add(path, ViolationCode.RESERVED_KEY, f"reserved key {value!r} used as {label} reference")
        elif not is_safe_name(value):
            self.errors.add(path, ViolationCode.NAME_PATTERN, f"invalid {label} reference {value!r}")

    # -- components ------------------------------------------------------

    def components(self, value: Any, path: str) -> None:
        if not self._expect_object(value, path, "components"):
            return
        vocab = self.vocab
        for name, component in value.items():
            component_path = join_pointer(path, name)
            self._map_key(name, component_path, "component")
            if not self._expect_object(component, component_path, "component"):
                continue
            self._check_keys(
                component,
                component_shape(self.dialect),
                component_path,
                foreign={self.foreign.rotation, self.foreign.offset},
            )
            self._dimension(component, "width", component_path)
            self._dimension(component, "height", component_path)
            if "probability" in component:
                check_bounded(
                    self.errors,
                    component["probability"],
                    join_pointer(component_path, "probability"),
                    low=0,
                    high=100,
                    label="probability",
                )
            if vocab.rotation in component:
                check_bounded_or_list(
                    self.errors,
                    component[vocab.rotation],
                    join_pointer(component_path, vocab.rotation),
                    low=-360,
                    high=360,
                    label=vocab.rotation,
                )
            if vocab.offset in component:
                self._offset(component[vocab.offset], join_pointer(component_path, vocab.offset))
            if "variants" in component:
                self._variants(component["variants"], join_pointer(component_path, "variants"))

    def _offset(self, value: Any, path: str) -> None:
        if not self._expect_object(value, path, self.vocab.offset):
            return
        self._check_keys(value, OFFSET_SHAPE, path)
        for axis in ("x", "y"):
            if axis in value:
                check_bounded_or_list(
                    self.errors,
                    value[axis],
                    join_pointer(path, axis),
                    low=-100,
                    high=100,
                    label=f"{self.vocab.offset}.{axis}",
                )

    def _variants(self, value: Any, path: str) -> None:
        if not self._expect_object(value, path, "variants"):
            return
        key = self.vocab.elements
        for name, variant in value.items():
            variant_path = join_pointer(path, name)
            self._map_key(name, variant_path, "variant")
            if not self._expect_object(variant, variant_path, "variant"):
                continue
            self._check_keys(variant, variant_shape(self.dialect), variant_path, foreign={self.foreign.elements})
            if key in variant:
                self.element_list(variant[key], join_pointer(variant_path, key), depth=1)


def _finish(walker: _DefinitionWalker, label: str) -> ValidationReport:
    report = walker.errors.report()
    logger.debug("%s validated: %d violation(s)", label, len(report.violations))
    return report


def validate_definition(document: Any, max_depth: Optional[int] = None) -> ValidationReport:
    """Validate a whole definition document and return every violation found."""
    walker = _DefinitionWalker(_resolve_max_depth(max_depth))
    walker.document(document)
    return _finish(walker, "Definition")


def is_valid_definition(document: Any, max_depth: Optional[int] = None) -> bool:
    return validate_definition(document, max_depth=max_depth).valid


def ensure_valid_definition(document: Any, max_depth: Optional[int] = None) -> ValidationReport:
    """Return the report for an accepted definition; raise for a rejected one."""
    report = validate_definition(document, max_depth=max_depth)
    if not report.valid:
        raise DefinitionValidationError(
            f"Definition rejected with {len(report.violations)} violation(s)", report
        )
    return report


def validate_element(node: Any, max_depth: Optional[int] = None) -> ValidationReport:
    """Validate a single element node (and its children) outside of a document."""
    walker = _DefinitionWalker(_resolve_max_depth(max_depth))
    walker.element(node, "")
    return _finish(walker, "Element")


def validate_attributes(attributes: Any) -> ValidationReport:
    walker = _DefinitionWalker(_resolve_max_depth(None))
    walker.attributes(attributes, "")
    return _finish(walker, "Attributes")


def validate_color_attribute(value: Any) -> ValidationReport:
    walker = _DefinitionWalker(_resolve_max_depth(None))
    walker.color_attribute(value, "")
    return _finish(walker, "Color attribute")
