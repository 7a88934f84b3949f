import pytest
from jsonschema import Draft202012Validator

from avatarguard.tools.json_schema import (
    DEFINITION_SCHEMA,
    OPTIONS_SCHEMA,
    _NAMED_OPTION_SCHEMAS,
    _SUFFIX_SCHEMAS,
    schema_errors,
    schema_for,
)
from avatarguard.tools.options_validator import NAMED_OPTIONS, SUFFIX_OPTIONS

BODY_DOCUMENT = {
    "meta": {"creator": {"name": "Jane", "url": "https://example.com"}},
    "attributes": {"fill": "none"},
    "body": {
        "content": [
            {"type": "element", "name": "style", "value": ".a { fill: red; }"},
            {
                "type": "element",
                "name": "g",
                "attributes": {"fill": {"type": "color", "value": "skin"}},
                "children": [
                    {"type": "component", "value": "eyes"},
                    {"type": "text", "value": {"type": "variable", "value": "initials"}},
                ],
            },
        ],
        "width": 100,
        "height": 100,
    },
    "components": {
        "eyes": {
            "width": 50,
            "height": 50,
            "probability": 80,
            "rotation": [-10, 10],
            "offset": {"x": 0, "y": [-5, 5]},
            "variants": {"open": {"content": [{"type": "element", "name": "circle", "attributes": {"r": "4"}}]}},
        }
    },
    "colors": {"skin": {"values": ["#f0c090"], "notEqualTo": ["hair"]}},
}


def test_schemas_are_valid_draft_2020_12():
    Draft202012Validator.check_schema(DEFINITION_SCHEMA)
    Draft202012Validator.check_schema(OPTIONS_SCHEMA)


def test_schema_tables_follow_the_validator_tables():
    assert set(_NAMED_OPTION_SCHEMAS) == set(NAMED_OPTIONS)
    assert set(_SUFFIX_SCHEMAS) == set(SUFFIX_OPTIONS)


def test_definition_schema_accepts_both_dialects():
    assert schema_errors("definition", BODY_DOCUMENT) == []
    canvas = {
        "canvas": {"elements": [], "width": 10, "height": 10},
        "components": {
            "eyes": {"width": 5, "height": 5, "rotate": 0, "translate": {"x": 1, "y": 1}, "variants": {"a": {"elements": []}}}
        },
        "colors": {"skin": {"values": []}},
    }
    assert schema_errors("definition", canvas) == []


def test_definition_schema_rejects_structural_problems():
    for document in (
        {},
        {"body": {"content": [], "width": 100, "height": 100}, "canvas": {"elements": [], "width": 1, "height": 1}},
        {"body": {"content": [{"type": "element", "name": "script"}], "width": 100, "height": 100}},
        {"body": {"content": [{"type": "element", "name": "rect", "value": "x"}], "width": 100, "height": 100}},
        {"body": {"content": [{"type": "element", "name": "rect", "attributes": {"onclick": "x"}}], "width": 1, "height": 1}},
        {"body": {"content": [], "width": 0.5, "height": 100}},
        {"body": {"content": [], "width": 100, "height": 100}, "colors": {"Skin": {"values": ["#fff"]}}},
        {"body": {"content": [], "width": 100, "height": 100}, "colors": {"constructor": {"values": ["#fff"]}}},
        {"body": {"content": [], "width": 100, "height": 100}, "colors": {"skin": {"values": []}}},
        {"body": {"content": [], "width": 100, "height": 100}, "meta": {"source": {"url": "javascript:alert(1)"}}},
    ):
        assert schema_errors("definition", document), document


def test_options_schema():
    assert schema_errors("options", {}) == []
    assert schema_errors("options", {
        "seed": "Felix",
        "flip": ["none", "both"],
        "fontWeight": [300, 700],
        "headRotation": [-30, 30],
        "rotate": 90,
        "skinColor": "ff0000",
        "translateX": 10,
        "eyesVariant": ["a", "b"],
    }) == []
    for options in (
        {"malicious": 1},
        {"constructorColor": "fff"},
        {"headRotation": [-361, 30]},
        {"headProbability": 50.5},
        {"fontFamily": "Arial; color: red"},
        {"skinColor": "#ffff"},
        {"size": True},
    ):
        assert schema_errors("options", options), options


def test_error_lines_carry_a_pointer():
    errors = schema_errors("options", {"headProbability": 101})
    assert errors and errors[0].startswith("/headProbability: ")


def test_unknown_schema_kind():
    with pytest.raises(ValueError):
        schema_for("avatar")
    with pytest.raises(ValueError):
        schema_errors("avatar", {})


def test_schema_for_returns_a_private_copy():
    published = schema_for("options")
    published["additionalProperties"] = True
    published["properties"].clear()
    assert schema_for("options")["additionalProperties"] is False
    assert schema_errors("options", {"malicious": 1})
    assert schema_errors("options", {"size": "big"})
