"""Numeric checks shared by the definition and options validators."""
from __future__ import annotations

import math
from typing import Any, Optional

from avatarguard.models.report import ViolationCode
from avatarguard.tools.accumulator import ViolationCollector, join_pointer


def type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    # bool is an int subclass; JSON booleans are never numbers.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    """JSON integers: ``3`` and ``3.0`` qualify, ``3.5`` and ``True`` do not."""
    if not is_number(value):
        return False
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer()
    return True


def _describe_bounds(low: Optional[float], high: Optional[float]) -> str:
    if low is not None and high is not None:
        return f"between {low} and {high}"
    if low is not None:
        return f"at least {low}"
    return f"at most {high}"


def check_bounded(
    errors: ViolationCollector,
    value: Any,
    path: str,
    *,
    low: Optional[float] = None,
    high: Optional[float] = None,
    integer: bool = False,
    label: str = "value",
) -> None:
    """Report a violation unless ``value`` is a finite number inside the bounds."""
    if not (is_integer(value) if integer else is_number(value)):
        kind = "an integer" if integer else "a number"
        errors.add(path, ViolationCode.WRONG_TYPE, f"{label} must be {kind}, got {type_name(value)}")
        return
    if isinstance(value, float) and not math.isfinite(value):
        errors.add(path, ViolationCode.OUT_OF_RANGE, f"{label} must be finite")
        return
    if (low is not None and value < low) or (high is not None and value > high):
        errors.add(
            path,
            ViolationCode.OUT_OF_RANGE,
            f"{label} must be {_describe_bounds(low, high)}, got {value}",
        )


def check_bounded_or_list(
    errors: ViolationCollector,
    value: Any,
    path: str,
    *,
    min_items: int = 1,
    max_items: int = 2,
    low: Optional[float] = None,
    high: Optional[float] = None,
    integer: bool = False,
    label: str = "value",
) -> None:
    """A bounded number, or an array of ``min_items``..``max_items`` bounded numbers."""
    if isinstance(value, list):
        if not min_items <= len(value) <= max_items:
            expected = str(min_items) if min_items == max_items else f"{min_items} to {max_items}"
            errors.add(path, ViolationCode.ARITY, f"{label} array must have {expected} item(s), got {len(value)}")
        for index, item in enumerate(value):
            check_bounded(
                errors,
                item,
                join_pointer(path, index),
                low=low,
                high=high,
                integer=integer,
                label=label,
            )
        return
    check_bounded(errors, value, path, low=low, high=high, integer=integer, label=label)
