"""Security-focused validation for avatar definition and options documents."""
from __future__ import annotations

from avatarguard.models.report import ErrorCategory, ValidationReport, Violation, ViolationCode
from avatarguard.tools.definition_validator import (
    DefinitionValidationError,
    ensure_valid_definition,
    is_valid_definition,
    validate_attributes,
    validate_color_attribute,
    validate_definition,
    validate_element,
)
from avatarguard.tools.options_validator import (
    OptionsValidationError,
    ensure_valid_options,
    is_valid_options,
    validate_options,
)

__all__ = [
    "DefinitionValidationError",
    "ErrorCategory",
    "OptionsValidationError",
    "ValidationReport",
    "Violation",
    "ViolationCode",
    "ensure_valid_definition",
    "ensure_valid_options",
    "is_valid_definition",
    "is_valid_options",
    "validate_attributes",
    "validate_color_attribute",
    "validate_definition",
    "validate_element",
    "validate_options",
]
