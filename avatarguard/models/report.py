"""Violation report models."""
from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    STRUCTURAL = "structural"
    SECURITY = "security"
    RESOURCE = "resource"


class ViolationCode(str, Enum):
    # structural
    WRONG_TYPE = "wrong_type"
    MISSING_FIELD = "missing_field"
    UNKNOWN_FIELD = "unknown_field"
    INVALID_ENUM = "invalid_enum"
    OUT_OF_RANGE = "out_of_range"
    ARITY = "arity"
    NAME_PATTERN = "name_pattern"
    INVALID_COLOR = "invalid_color"
    UNKNOWN_VARIABLE = "unknown_variable"
    DIALECT_MIXED = "dialect_mixed"
    # security
    DISALLOWED_ELEMENT = "disallowed_element"
    DISALLOWED_ATTRIBUTE = "disallowed_attribute"
    EVENT_HANDLER = "event_handler"
    NAMESPACE_ATTRIBUTE = "namespace_attribute"
    UNSAFE_URL = "unsafe_url"
    UNSAFE_CSS = "unsafe_css"
    UNSAFE_VALUE = "unsafe_value"
    RESERVED_KEY = "reserved_key"
    # resource
    DEPTH_EXCEEDED = "depth_exceeded"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORY_BY_CODE[self]


_SECURITY_CODES = {
    ViolationCode.DISALLOWED_ELEMENT,
    ViolationCode.DISALLOWED_ATTRIBUTE,
    ViolationCode.EVENT_HANDLER,
    ViolationCode.NAMESPACE_ATTRIBUTE,
    ViolationCode.UNSAFE_URL,
    ViolationCode.UNSAFE_CSS,
    ViolationCode.UNSAFE_VALUE,
    ViolationCode.RESERVED_KEY,
}

_CATEGORY_BY_CODE = {
    code: (
        ErrorCategory.RESOURCE
        if code is ViolationCode.DEPTH_EXCEEDED
        else ErrorCategory.SECURITY
        if code in _SECURITY_CODES
        else ErrorCategory.STRUCTURAL
    )
    for code in ViolationCode
}


class Violation(BaseModel):
    path: str
    code: ViolationCode
    category: ErrorCategory
    message: str

    model_config = {"frozen": True}


class ValidationReport(BaseModel):
    """Outcome of one validation call. Valid only when no violation was found."""

    valid: bool
    violations: List[Violation] = Field(default_factory=list)

    @classmethod
    def from_violations(cls, violations: List[Violation]) -> "ValidationReport":
        return cls(valid=not violations, violations=list(violations))

    def codes(self) -> List[ViolationCode]:
        return [violation.code for violation in self.violations]

    def by_category(self, category: ErrorCategory) -> List[Violation]:
        return [violation for violation in self.violations if violation.category == category]

    def has_code(self, code: ViolationCode) -> bool:
        return any(violation.code == code for violation in self.violations)
