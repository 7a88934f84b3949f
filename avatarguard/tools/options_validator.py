"""Validator for flat avatar options maps.

Keys are either fixed option names (``seed``, ``size``, ``flip``...) or
composed from an optional component-name prefix and a suffix such as
``Probability`` or ``Color`` (``headProbability``, ``skinColor``, or the bare
``rotate``). Each key is dispatched to the grammar of its name or suffix; keys
that match neither table are rejected.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from avatarguard.models.report import ValidationReport, ViolationCode
from avatarguard.models.rules import FLIP_VALUES
from avatarguard.tools.accumulator import ViolationCollector, join_pointer
from avatarguard.tools.color_values import is_option_color
from avatarguard.tools.numbers import check_bounded, check_bounded_or_list, type_name
from avatarguard.tools.security_policy import is_reserved_key, is_safe_font_family

logger = logging.getLogger(__name__)

OptionCheck = Callable[[ViolationCollector, Any, str, str], None]


class OptionsValidationError(ValueError):
    """Raised by :func:`ensure_valid_options` when an options map is rejected."""

    def __init__(self, message: str, report: ValidationReport):
        super().__init__(message)
        self.report = report


@dataclass(frozen=True)
class OptionKey:
    key: str
    prefix: Optional[str]
    suffix: Optional[str]

    @property
    def is_named(self) -> bool:
        return self.suffix is None


# -- value grammars --------------------------------------------------------

def _string(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    if not isinstance(value, str):
        errors.add(path, ViolationCode.WRONG_TYPE, f"{key} must be a string, got {type_name(value)}")


def _boolean(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    if not isinstance(value, bool):
        errors.add(path, ViolationCode.WRONG_TYPE, f"{key} must be a boolean, got {type_name(value)}")


def _string_or_list(
    errors: ViolationCollector,
    value: Any,
    path: str,
    key: str,
    item_check: Callable[[ViolationCollector, Any, str, str], None],
    min_items: int = 0,
) -> None:
    if isinstance(value, list):
        if len(value) < min_items:
            errors.add(path, ViolationCode.ARITY, f"{key} array needs at least {min_items} item(s)")
        for index, item in enumerate(value):
            item_check(errors, item, join_pointer(path, index), key)
        return
    item_check(errors, value, path, key)


def _size(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    check_bounded(errors, value, path, low=1, integer=True, label=key)


def _flip_item(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    if not isinstance(value, str):
        errors.add(path, ViolationCode.WRONG_TYPE, f"{key} must be a string, got {type_name(value)}")
    elif value not in FLIP_VALUES:
        errors.add(path, ViolationCode.INVALID_ENUM, f"{key} must be one of {sorted(FLIP_VALUES)}, got {value!r}")


def _flip(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    _string_or_list(errors, value, path, key, _flip_item, min_items=1)


def _font_family_item(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    if not isinstance(value, str):
        errors.add(path, ViolationCode.WRONG_TYPE, f"{key} must be a string, got {type_name(value)}")
    elif not is_safe_font_family(value):
        errors.add(
            path,
            ViolationCode.UNSAFE_VALUE,
            f"{key} may only contain letters, digits, spaces, hyphens and underscores",
        )


def _font_family(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    _string_or_list(errors, value, path, key, _font_family_item, min_items=1)


def _font_weight(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    check_bounded_or_list(errors, value, path, min_items=2, max_items=2, low=1, high=1000, integer=True, label=key)


def _scale(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    check_bounded_or_list(errors, value, path, min_items=2, max_items=2, low=0, label=key)


def _corner_radius(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    check_bounded_or_list(errors, value, path, min_items=2, max_items=2, low=0, high=50, label=key)


def _probability(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    check_bounded(errors, value, path, low=0, high=100, integer=True, label=key)


def _variant(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    _string_or_list(errors, value, path, key, _string)


def _color_item(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    if not isinstance(value, str):
        errors.add(path, ViolationCode.WRONG_TYPE, f"{key} must be a hex color string, got {type_name(value)}")
    elif not is_option_color(value):
        errors.add(path, ViolationCode.INVALID_COLOR, f"{key} must be a 3, 6 or 8 digit hex color, got {value!r}")


def _color(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    _string_or_list(errors, value, path, key, _color_item)


def _rotation(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    check_bounded_or_list(errors, value, path, low=-360, high=360, integer=True, label=key)


def _offset(errors: ViolationCollector, value: Any, path: str, key: str) -> None:
    check_bounded_or_list(errors, value, path, low=-100, high=100, integer=True, label=key)


NAMED_OPTIONS: Dict[str, OptionCheck] = {
    "seed": _string,
    "size": _size,
    "idRandomization": _boolean,
    "flip": _flip,
    "flipDirection": _flip,
    "fontFamily": _font_family,
    "fontWeight": _font_weight,
    "scale": _scale,
    "scaleFactor": _scale,
    "borderRadius": _corner_radius,
    "cornerRadius": _corner_radius,
}

SUFFIX_OPTIONS: Dict[str, OptionCheck] = {
    "Probability": _probability,
    "Variant": _variant,
    "Color": _color,
    "Rotation": _rotation,
    "Rotate": _rotation,
    "VerticalOffset": _offset,
    "HorizontalOffset": _offset,
    "TranslateX": _offset,
    "TranslateY": _offset,
}

_SUFFIX_KEY_RE = re.compile(
    r"(?P<prefix>[a-z][A-Za-z0-9]*)?(?P<suffix>" + "|".join(SUFFIX_OPTIONS) + r")"
)
# Un-prefixed forms start lower-case: "rotate", "translateX", "probability".
BARE_SUFFIXES: Dict[str, str] = {suffix[0].lower() + suffix[1:]: suffix for suffix in SUFFIX_OPTIONS}


def match_option_key(key: Any) -> Optional[OptionKey]:
    """Classify an options key, or return None when no table accepts it."""
    if not isinstance(key, str):
        return None
    if key in NAMED_OPTIONS:
        return OptionKey(key=key, prefix=None, suffix=None)
    if key in BARE_SUFFIXES:
        return OptionKey(key=key, prefix=None, suffix=BARE_SUFFIXES[key])
    match = _SUFFIX_KEY_RE.fullmatch(key)
    if match:
        return OptionKey(key=key, prefix=match.group("prefix"), suffix=match.group("suffix"))
    return None


def _validate_options(options: Any, errors: ViolationCollector) -> None:
    if not isinstance(options, dict):
        errors.add("", ViolationCode.WRONG_TYPE, f"options must be an object, got {type_name(options)}")
        return
    for key, value in options.items():
        path = join_pointer("", key)
        if is_reserved_key(key):
            errors.add(path, ViolationCode.RESERVED_KEY, f"reserved key {key!r}")
            continue
        option = match_option_key(key)
        if option is None:
            errors.add(path, ViolationCode.UNKNOWN_FIELD, f"unknown option {key!r}")
            continue
        if option.prefix is not None and is_reserved_key(option.prefix):
            errors.add(path, ViolationCode.RESERVED_KEY, f"reserved component name {option.prefix!r} in {key!r}")
            continue
        check = NAMED_OPTIONS[key] if option.is_named else SUFFIX_OPTIONS[option.suffix]
        check(errors, value, path, key)


def validate_options(options: Any) -> ValidationReport:
    """Validate an options map and return every violation found."""
    errors = ViolationCollector()
    _validate_options(options, errors)
    report = errors.report()
    logger.debug("Options validated: %d violation(s)", len(report.violations))
    return report


def is_valid_options(options: Any) -> bool:
    return validate_options(options).valid


def ensure_valid_options(options: Any) -> ValidationReport:
    report = validate_options(options)
    if not report.valid:
        raise OptionsValidationError(f"Options rejected with {len(report.violations)} violation(s)", report)
    return report
