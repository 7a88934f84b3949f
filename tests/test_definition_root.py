import pytest

from avatarguard import (
    DefinitionValidationError,
    ErrorCategory,
    ViolationCode,
    ensure_valid_definition,
    is_valid_definition,
    validate_definition,
)


def _with_body(**extra):
    return {"body": {"content": [], "width": 100, "height": 100}, **extra}


def _codes(document):
    return validate_definition(document).codes()


# root


def test_accepts_minimal_and_full_documents():
    assert is_valid_definition(_with_body())
    assert is_valid_definition({
        "meta": {},
        "attributes": {},
        "body": {"content": [], "width": 100, "height": 100},
        "components": {},
        "colors": {},
    })
    assert is_valid_definition({"body": {"content": [], "width": 1.5, "height": 2.7}})


def test_rejects_missing_surface():
    report = validate_definition({})
    assert report.codes() == [ViolationCode.MISSING_FIELD]
    assert report.violations[0].path == "/body"


def test_rejects_incomplete_body():
    assert sorted(_codes({"body": {}})) == [ViolationCode.MISSING_FIELD] * 3


def test_dimension_rules():
    assert _codes({"body": {"content": [], "width": 0, "height": 100}}) == [ViolationCode.OUT_OF_RANGE]
    assert _codes({"body": {"content": [], "width": 100, "height": 0}}) == [ViolationCode.OUT_OF_RANGE]
    assert _codes({"body": {"content": [], "width": -5, "height": 100}}) == [ViolationCode.OUT_OF_RANGE]
    assert _codes({"body": {"content": [], "width": 100, "height": -5}}) == [ViolationCode.OUT_OF_RANGE]
    assert _codes({"body": {"content": [], "width": 0.999, "height": 100}}) == [ViolationCode.OUT_OF_RANGE]
    assert is_valid_definition({"body": {"content": [], "width": 1, "height": 1}})


def test_no_implicit_coercion():
    assert _codes({"body": {"content": "abc", "width": 100, "height": 100}}) == [ViolationCode.WRONG_TYPE]
    assert _codes({"body": {"content": [], "width": "100", "height": 100}}) == [ViolationCode.WRONG_TYPE]
    assert _codes({"body": {"content": [], "width": True, "height": 100}}) == [ViolationCode.WRONG_TYPE]
    assert _codes("not a document") == [ViolationCode.WRONG_TYPE]


def test_rejects_unknown_keys():
    report = validate_definition(_with_body(malicious="payload"))
    assert report.codes() == [ViolationCode.UNKNOWN_FIELD]
    assert report.violations[0].path == "/malicious"
    assert _codes({"body": {"content": [], "width": 100, "height": 100, "extra": "data"}}) == [
        ViolationCode.UNKNOWN_FIELD
    ]


def test_reserved_key_at_root():
    assert _codes(_with_body(constructor={})) == [ViolationCode.RESERVED_KEY]


def test_root_attributes_are_checked():
    report = validate_definition(_with_body(attributes={"onload": "alert(1)"}))
    assert report.codes() == [ViolationCode.EVENT_HANDLER]
    assert report.violations[0].path == "/attributes/onload"


def test_content_elements_are_walked():
    document = {
        "body": {
            "content": [
                {"type": "element", "name": "path", "attributes": {"fill": "red", "d": "M0 0L10 10"}},
                {"type": "element", "name": "foreignObject"},
            ],
            "width": 100,
            "height": 100,
        }
    }
    report = validate_definition(document)
    assert report.codes() == [ViolationCode.DISALLOWED_ELEMENT]
    assert report.violations[0].path == "/body/content/1/name"


def test_ensure_valid_definition_raises_with_report():
    assert ensure_valid_definition(_with_body()).valid
    with pytest.raises(DefinitionValidationError) as excinfo:
        ensure_valid_definition(_with_body(attributes={"href": "javascript:alert(1)"}))
    assert excinfo.value.report.codes() == [ViolationCode.UNSAFE_URL]


# meta


def test_meta_accepts_empty_full_and_partial():
    assert is_valid_definition(_with_body(meta={}))
    assert is_valid_definition(_with_body(meta={
        "license": {"name": "MIT", "url": "https://opensource.org/license/mit", "text": "..."},
        "creator": {"name": "DiceBear", "url": "https://dicebear.com"},
        "source": {"name": "MyProject", "url": "https://example.com"},
    }))
    assert is_valid_definition(_with_body(meta={"creator": {"name": "Jane"}}))
    assert is_valid_definition(_with_body(meta={"creator": {"url": "http://example.com"}}))


def test_meta_rejects_wrong_types_and_extra_keys():
    assert _codes(_with_body(meta={"creator": {"name": 123}})) == [ViolationCode.WRONG_TYPE]
    assert _codes(_with_body(meta="invalid")) == [ViolationCode.WRONG_TYPE]
    assert _codes(_with_body(meta={"extra": "data"})) == [ViolationCode.UNKNOWN_FIELD]
    for section in ("license", "creator", "source"):
        assert _codes(_with_body(meta={section: {"name": "x", "extra": "data"}})) == [ViolationCode.UNKNOWN_FIELD]


def test_meta_url_security():
    for section, url in (
        ("creator", "javascript:alert(1)"),
        ("license", "javascript:alert(1)"),
        ("source", "data:text/html,<script>alert(1)</script>"),
        ("creator", "file:///etc/passwd"),
        ("creator", "//evil.com/steal"),
    ):
        report = validate_definition(_with_body(meta={section: {"url": url}}))
        assert report.codes() == [ViolationCode.UNSAFE_URL], url
        assert report.violations[0].path == f"/meta/{section}/url"


# colors


def test_colors_accepted():
    assert is_valid_definition(_with_body(colors={}))
    assert is_valid_definition(_with_body(colors={"skin": {"values": ["#ff0000", "#00ff00"]}}))
    assert is_valid_definition(_with_body(colors={"skin": {"values": ["#ff0000"], "notEqualTo": ["hair"]}}))
    assert is_valid_definition(_with_body(colors={"skin": {"values": ["#ff0000"], "contrastTo": "background"}}))


def test_colors_rejected():
    assert _codes(_with_body(colors={"skin": {"values": ["ff0000"]}})) == [ViolationCode.INVALID_COLOR]
    assert _codes(_with_body(colors={"skin": {}})) == [ViolationCode.MISSING_FIELD]
    assert _codes(_with_body(colors={"skin": {"values": ["#xyz123"]}})) == [ViolationCode.INVALID_COLOR]
    assert _codes(_with_body(colors={"skin": {"values": ["#ff0000"], "notEqualTo": ["Uppercase"]}})) == [
        ViolationCode.NAME_PATTERN
    ]
    assert _codes(_with_body(colors={"skin": {"values": ["#ff0000"], "extra": "data"}})) == [
        ViolationCode.UNKNOWN_FIELD
    ]


def test_body_dialect_requires_palette_values():
    assert _codes(_with_body(colors={"skin": {"values": []}})) == [ViolationCode.ARITY]


def test_color_group_names():
    assert _codes(_with_body(colors={"Skin": {"values": ["#fff"]}})) == [ViolationCode.NAME_PATTERN]
    report = validate_definition(_with_body(colors={"__proto__": {"values": ["#fff"]}}))
    assert report.codes() == [ViolationCode.RESERVED_KEY]
    assert report.violations[0].category == ErrorCategory.SECURITY
    assert _codes(_with_body(colors={"skin": {"values": ["#fff"], "contrastTo": "prototype"}})) == [
        ViolationCode.RESERVED_KEY
    ]


def test_report_collects_violations_from_every_section():
    document = {
        "meta": {"creator": {"url": "javascript:alert(1)"}},
        "body": {"content": [{"type": "element", "name": "script"}], "width": 0, "height": 100},
        "colors": {"skin": {"values": ["red"]}},
        "extra": True,
    }
    report = validate_definition(document)
    assert set(report.codes()) == {
        ViolationCode.UNKNOWN_FIELD,
        ViolationCode.UNSAFE_URL,
        ViolationCode.OUT_OF_RANGE,
        ViolationCode.DISALLOWED_ELEMENT,
        ViolationCode.INVALID_COLOR,
    }
    assert len(report.violations) == 5


def test_dimensions_beyond_float_range():
    huge = 10 ** 400
    assert is_valid_definition({"body": {"content": [], "width": huge, "height": 100}})
    report = validate_definition({"body": {"content": [], "width": 100, "height": -huge}})
    assert report.codes() == [ViolationCode.OUT_OF_RANGE]
    assert report.violations[0].path == "/body/height"
