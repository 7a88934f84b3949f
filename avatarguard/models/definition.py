"""Field contracts for definition documents and their two naming dialects.

A definition is written either in the ``body`` dialect::

    {"body": {"content": [...], "width": 100, "height": 100},
     "components": {"eyes": {"rotation": ..., "offset": {...},
                             "variants": {"open": {"content": [...]}}}}}

or in the ``canvas`` dialect, which renames the same fields::

    {"canvas": {"elements": [...], "width": 100, "height": 100},
     "components": {"eyes": {"rotate": ..., "translate": {...},
                             "variants": {"open": {"elements": [...]}}}}}

One document commits to one dialect; the validator reports any field taken
from the other vocabulary as ``dialect_mixed``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional


class Dialect(str, Enum):
    BODY = "body"
    CANVAS = "canvas"

    @property
    def other(self) -> "Dialect":
        return Dialect.CANVAS if self is Dialect.BODY else Dialect.BODY


@dataclass(frozen=True)
class DialectVocabulary:
    surface: str
    elements: str
    rotation: str
    offset: str


VOCABULARIES: Dict[Dialect, DialectVocabulary] = {
    Dialect.BODY: DialectVocabulary(surface="body", elements="content", rotation="rotation", offset="offset"),
    Dialect.CANVAS: DialectVocabulary(surface="canvas", elements="elements", rotation="rotate", offset="translate"),
}


@dataclass(frozen=True)
class ObjectShape:
    """Closed set of keys for one object type; anything else is unknown."""

    required: FrozenSet[str] = frozenset()
    optional: FrozenSet[str] = frozenset()

    @property
    def allowed(self) -> FrozenSet[str]:
        return self.required | self.optional


def root_shape(dialect: Dialect) -> ObjectShape:
    vocab = VOCABULARIES[dialect]
    return ObjectShape(
        required=frozenset({vocab.surface}),
        optional=frozenset({"meta", "attributes", "components", "colors"}),
    )


def surface_shape(dialect: Dialect) -> ObjectShape:
    return ObjectShape(required=frozenset({VOCABULARIES[dialect].elements, "width", "height"}))


def component_shape(dialect: Dialect) -> ObjectShape:
    vocab = VOCABULARIES[dialect]
    return ObjectShape(
        required=frozenset({"width", "height", "variants"}),
        optional=frozenset({"probability", vocab.rotation, vocab.offset}),
    )


def variant_shape(dialect: Dialect) -> ObjectShape:
    return ObjectShape(required=frozenset({VOCABULARIES[dialect].elements}))


def dialect_of_key(key: str, field: str) -> Optional[Dialect]:
    """Return the dialect that owns ``key`` when used as the given field kind."""
    for dialect, vocab in VOCABULARIES.items():
        if getattr(vocab, field) == key:
            return dialect
    return None


META_SHAPE = ObjectShape(optional=frozenset({"license", "creator", "source"}))
META_ENTRY_SHAPE = ObjectShape(optional=frozenset({"name", "url", "text"}))
OFFSET_SHAPE = ObjectShape(required=frozenset({"x", "y"}))
COLOR_GROUP_SHAPE = ObjectShape(required=frozenset({"values"}), optional=frozenset({"notEqualTo", "contrastTo"}))
COLOR_REFERENCE_SHAPE = ObjectShape(required=frozenset({"type", "value"}))
VARIABLE_REFERENCE_SHAPE = ObjectShape(required=frozenset({"type", "value"}))

# Element nodes are a tagged union over ``type``.
ELEMENT_SHAPES: Dict[str, ObjectShape] = {
    "element": ObjectShape(
        required=frozenset({"type", "name"}),
        optional=frozenset({"attributes", "children", "value"}),
    ),
    "text": ObjectShape(required=frozenset({"type"}), optional=frozenset({"value", "children"})),
    "component": ObjectShape(required=frozenset({"type", "value"})),
}

# ``value`` on a plain element is only legal for this element name.
STYLE_ELEMENT = "style"

# Dimension lower bound for surfaces and components.
MIN_DIMENSION = 1
