"""JSON Schema (draft 2020-12) rendition of the definition and options contracts.

The schemas carry the structural half of the rules: field names, types,
ranges, enums and name patterns, built from the same tables the validators
use. URL and CSS checks that a schema cannot express stay in the validators,
which remain the gate in front of the renderer. The schemas are published for
editors and other tooling that speaks JSON Schema.
"""
from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

from avatarguard.models.definition import ELEMENT_SHAPES, MIN_DIMENSION, STYLE_ELEMENT, VOCABULARIES, Dialect
from avatarguard.models.rules import (
    ALLOWED_ELEMENTS,
    ATTRIBUTE_POLICIES,
    DANGEROUS_ELEMENTS,
    FLIP_VALUES,
    RESERVED_KEYS,
    TEXT_VARIABLES,
    AttributePolicy,
)
from avatarguard.tools.accumulator import join_pointer
from avatarguard.tools.color_values import COLOR_REFERENCE_NAME_RE, HEX_COLOR_RE, OPTION_HEX_RE
from avatarguard.tools.options_validator import BARE_SUFFIXES, NAMED_OPTIONS, SUFFIX_OPTIONS
from avatarguard.tools.security_policy import FONT_FAMILY_RE, NAME_RE

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
SCHEMA_KINDS = ("definition", "options")


def _anchored(pattern: "re.Pattern[str]") -> str:
    return f"^(?:{pattern.pattern})$"


def _ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/$defs/{name}"}


def _bounded(low: Optional[float] = None, high: Optional[float] = None, integer: bool = False) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "integer" if integer else "number"}
    if low is not None:
        schema["minimum"] = low
    if high is not None:
        schema["maximum"] = high
    return schema


def _bounded_or_list(min_items: int = 1, max_items: int = 2, **bounds: Any) -> Dict[str, Any]:
    item = _bounded(**bounds)
    return {"anyOf": [item, {"type": "array", "items": item, "minItems": min_items, "maxItems": max_items}]}


def _one_or_many(item: Dict[str, Any], min_items: int = 0) -> Dict[str, Any]:
    return {"anyOf": [item, {"type": "array", "items": item, "minItems": min_items}]}


def _closed(properties: Dict[str, Any], required: Any = ()) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object", "properties": properties, "additionalProperties": False}
    if required:
        schema["required"] = sorted(required)
    return schema


# -- definition ------------------------------------------------------------

def _attribute_schema(policy: AttributePolicy) -> Dict[str, Any]:
    if policy in (AttributePolicy.COLOR, AttributePolicy.PAINT):
        return {"anyOf": [{"type": "string"}, _ref("colorReference")]}
    return {"type": "string"}


def _element_defs() -> Dict[str, Any]:
    svg_element = _closed(
        {
            "type": {"const": "element"},
            "name": {"enum": sorted(ALLOWED_ELEMENTS - DANGEROUS_ELEMENTS)},
            "attributes": _ref("attributes"),
            "children": _ref("elements"),
            "value": {"type": "string"},
        },
        ELEMENT_SHAPES["element"].required,
    )
    svg_element["if"] = {"required": ["value"]}
    svg_element["then"] = {"properties": {"name": {"const": STYLE_ELEMENT}}}
    text_node = _closed(
        {
            "type": {"const": "text"},
            "value": {"anyOf": [{"type": "string"}, _ref("variableReference")]},
            "children": _ref("elements"),
        },
        ELEMENT_SHAPES["text"].required,
    )
    component_node = _closed(
        {"type": {"const": "component"}, "value": _ref("name")},
        ELEMENT_SHAPES["component"].required,
    )
    return {
        "element": {"oneOf": [svg_element, text_node, component_node]},
        "elements": {"type": "array", "items": _ref("element")},
        "variableReference": _closed(
            {"type": {"const": "variable"}, "value": {"enum": sorted(TEXT_VARIABLES)}},
            {"type", "value"},
        ),
        "attributes": _closed({key: _attribute_schema(policy) for key, policy in sorted(ATTRIBUTE_POLICIES.items())}),
        "colorReference": _closed(
            {"type": {"const": "color"}, "value": {"type": "string", "pattern": _anchored(COLOR_REFERENCE_NAME_RE)}},
            {"type", "value"},
        ),
    }


def _dialect_defs(dialect: Dialect) -> Dict[str, Any]:
    vocab = VOCABULARIES[dialect]
    prefix = dialect.value
    dimension = _bounded(low=MIN_DIMENSION)
    offset = _bounded_or_list(low=-100, high=100)
    variant = _closed({vocab.elements: _ref("elements")}, {vocab.elements})
    component = _closed(
        {
            "width": dimension,
            "height": dimension,
            "probability": _bounded(0, 100),
            vocab.rotation: _bounded_or_list(low=-360, high=360),
            vocab.offset: _closed({"x": offset, "y": offset}, {"x", "y"}),
            "variants": {"type": "object", "propertyNames": _ref("name"), "additionalProperties": variant},
        },
        {"width", "height", "variants"},
    )
    values: Dict[str, Any] = {"type": "array", "items": {"type": "string", "pattern": _anchored(HEX_COLOR_RE)}}
    if dialect is Dialect.BODY:
        values["minItems"] = 1
    color_group = _closed(
        {"values": values, "notEqualTo": {"type": "array", "items": _ref("name")}, "contrastTo": _ref("name")},
        {"values"},
    )
    surface = _closed({vocab.elements: _ref("elements"), "width": dimension, "height": dimension},
                      {vocab.elements, "width", "height"})
    document = _closed(
        {
            "meta": _ref("meta"),
            "attributes": _ref("attributes"),
            vocab.surface: surface,
            "components": {"type": "object", "propertyNames": _ref("name"), "additionalProperties": component},
            "colors": {"type": "object", "propertyNames": _ref("name"), "additionalProperties": color_group},
        },
        {vocab.surface},
    )
    return {f"{prefix}Document": document}


def build_definition_schema() -> Dict[str, Any]:
    meta_entry = _closed(
        {
            "name": {"type": "string"},
            "url": {"type": "string", "pattern": "^[hH][tT][tT][pP][sS]?://[^\\s/?#]"},
            "text": {"type": "string"},
        }
    )
    defs: Dict[str, Any] = {
        "name": {"type": "string", "pattern": _anchored(NAME_RE), "not": {"enum": sorted(RESERVED_KEYS)}},
        "meta": _closed({section: meta_entry for section in ("license", "creator", "source")}),
    }
    defs.update(_element_defs())
    for dialect in Dialect:
        defs.update(_dialect_defs(dialect))
    return {
        "$schema": SCHEMA_DIALECT,
        "title": "Avatar definition",
        "oneOf": [_ref(f"{dialect.value}Document") for dialect in Dialect],
        "$defs": defs,
    }


# -- options ---------------------------------------------------------------

_NAMED_OPTION_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "seed": {"type": "string"},
    "size": _bounded(low=1, integer=True),
    "idRandomization": {"type": "boolean"},
    "flip": _one_or_many({"enum": sorted(FLIP_VALUES)}, min_items=1),
    "flipDirection": _one_or_many({"enum": sorted(FLIP_VALUES)}, min_items=1),
    "fontFamily": _one_or_many({"type": "string", "pattern": _anchored(FONT_FAMILY_RE)}, min_items=1),
    "fontWeight": _bounded_or_list(2, 2, low=1, high=1000, integer=True),
    "scale": _bounded_or_list(2, 2, low=0),
    "scaleFactor": _bounded_or_list(2, 2, low=0),
    "borderRadius": _bounded_or_list(2, 2, low=0, high=50),
    "cornerRadius": _bounded_or_list(2, 2, low=0, high=50),
}

_ROTATION = _bounded_or_list(low=-360, high=360, integer=True)
_OFFSET = _bounded_or_list(low=-100, high=100, integer=True)

_SUFFIX_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "Probability": _bounded(0, 100, integer=True),
    "Variant": _one_or_many({"type": "string"}),
    "Color": _one_or_many({"type": "string", "pattern": _anchored(OPTION_HEX_RE)}),
    "Rotation": _ROTATION,
    "Rotate": _ROTATION,
    "VerticalOffset": _OFFSET,
    "HorizontalOffset": _OFFSET,
    "TranslateX": _OFFSET,
    "TranslateY": _OFFSET,
}


def build_options_schema() -> Dict[str, Any]:
    properties = dict(_NAMED_OPTION_SCHEMAS)
    properties.update({bare: _SUFFIX_SCHEMAS[suffix] for bare, suffix in BARE_SUFFIXES.items()})
    suffixes = "|".join(SUFFIX_OPTIONS)
    reserved = "|".join(re.escape(key) for key in sorted(RESERVED_KEYS))
    return {
        "$schema": SCHEMA_DIALECT,
        "title": "Avatar options",
        "type": "object",
        "properties": properties,
        "patternProperties": {
            f"^(?:[a-z][A-Za-z0-9]*)?{suffix}$": schema for suffix, schema in _SUFFIX_SCHEMAS.items()
        },
        "propertyNames": {"not": {"pattern": f"^(?:{reserved})(?:{suffixes})?$"}},
        "additionalProperties": False,
    }


DEFINITION_SCHEMA = build_definition_schema()
OPTIONS_SCHEMA = build_options_schema()

_VALIDATORS = {
    "definition": Draft202012Validator(DEFINITION_SCHEMA),
    "options": Draft202012Validator(OPTIONS_SCHEMA),
}


def schema_for(kind: str) -> Dict[str, Any]:
    """Return a copy of the published schema for ``definition`` or ``options``."""
    if kind == "definition":
        return copy.deepcopy(DEFINITION_SCHEMA)
    if kind == "options":
        return copy.deepcopy(OPTIONS_SCHEMA)
    raise ValueError(f"Unknown schema kind: {kind!r}; expected one of {SCHEMA_KINDS}")


def schema_errors(kind: str, payload: Any) -> List[str]:
    """Check a payload against a published schema; returns ``pointer: message`` lines."""
    schema_for(kind)
    errors = []
    for err in sorted(_VALIDATORS[kind].iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path]):
        location = join_pointer("", *err.absolute_path) or "/"
        errors.append(f"{location}: {err.message}")
    return errors
