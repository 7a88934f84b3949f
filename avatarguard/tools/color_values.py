"""Color grammars used by attributes, palettes and options."""
from __future__ import annotations

import re
from typing import Any, Optional

# Attribute color literals
_NAMED_COLOR_RE = re.compile(r"[a-zA-Z]+")
HEX_COLOR_RE = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})")
OPTION_HEX_RE = re.compile(r"#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})")

_NUMBER = r"(\d+(?:\.\d+)?|\.\d+)"
_RGB_RE = re.compile(
    rf"rgb\(\s*{_NUMBER}\s*,\s*{_NUMBER}\s*,\s*{_NUMBER}\s*\)", re.IGNORECASE
)
_RGBA_RE = re.compile(
    rf"rgba\(\s*{_NUMBER}\s*,\s*{_NUMBER}\s*,\s*{_NUMBER}\s*,\s*{_NUMBER}\s*\)", re.IGNORECASE
)
# hsl and hsb share a shape: hue, two percentages, optional alpha.
_HUE_RE = re.compile(
    rf"hs[lb]\(\s*{_NUMBER}\s*,\s*{_NUMBER}%\s*,\s*{_NUMBER}%\s*\)", re.IGNORECASE
)
_HUE_ALPHA_RE = re.compile(
    rf"hs[lb]a\(\s*{_NUMBER}\s*,\s*{_NUMBER}%\s*,\s*{_NUMBER}%\s*,\s*{_NUMBER}\s*\)", re.IGNORECASE
)

COLOR_REFERENCE_NAME_RE = re.compile(r"[a-z][a-zA-Z0-9]*")


def _in_range(raw: str, upper: float) -> bool:
    return 0 <= float(raw) <= upper


def _functional_color_ok(value: str) -> bool:
    match = _RGB_RE.fullmatch(value)
    if match:
        return all(_in_range(channel, 255) for channel in match.groups())
    match = _RGBA_RE.fullmatch(value)
    if match:
        r, g, b, alpha = match.groups()
        return all(_in_range(channel, 255) for channel in (r, g, b)) and _in_range(alpha, 1)
    match = _HUE_RE.fullmatch(value)
    if match:
        hue, first, second = match.groups()
        return _in_range(hue, 360) and _in_range(first, 100) and _in_range(second, 100)
    match = _HUE_ALPHA_RE.fullmatch(value)
    if match:
        hue, first, second, alpha = match.groups()
        return (
            _in_range(hue, 360)
            and _in_range(first, 100)
            and _in_range(second, 100)
            and _in_range(alpha, 1)
        )
    return False


def is_color_literal(value: Any) -> bool:
    """Named, hex, rgb(a), hsl(a) or hsb(a) color as written in an attribute."""
    if not isinstance(value, str) or not value:
        return False
    if _NAMED_COLOR_RE.fullmatch(value) or HEX_COLOR_RE.fullmatch(value):
        return True
    return _functional_color_ok(value)


def is_palette_color(value: Any) -> bool:
    """Palette entries are always ``#``-prefixed hex."""
    return isinstance(value, str) and HEX_COLOR_RE.fullmatch(value) is not None


def is_option_color(value: Any) -> bool:
    """Option colors are hex with an optional leading ``#``."""
    return isinstance(value, str) and OPTION_HEX_RE.fullmatch(value) is not None


def is_color_reference_name(value: Any) -> bool:
    return isinstance(value, str) and COLOR_REFERENCE_NAME_RE.fullmatch(value) is not None


def describe_color_problem(value: Any) -> Optional[str]:
    """Explain why a string is not an attribute color, or return None when it is one."""
    if not isinstance(value, str):
        return f"expected a color string, got {type(value).__name__}"
    if not value:
        return "empty color"
    if is_color_literal(value):
        return None
    if value.lower().startswith(("rgb", "hsl", "hsb")):
        return f"color function out of range or malformed: {value!r}"
    return f"not a color: {value!r}"
