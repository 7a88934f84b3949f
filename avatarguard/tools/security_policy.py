"""Security predicates for URLs, CSS text, identifiers and SVG vocabulary.

Every function here is pure: it looks at one value and answers whether that
value may reach the renderer. None of them knows where in a document the value
came from; the validators decide which predicate applies to which field.
"""
from __future__ import annotations

import re
from typing import Any, List

from avatarguard.models.rules import (
    ALLOWED_ELEMENTS,
    ATTRIBUTE_POLICIES,
    DANGEROUS_ELEMENTS,
    NAMESPACE_PREFIXES,
    RESERVED_KEYS,
)

# Patterns are matched with fullmatch(); "$" would accept a trailing newline.
_FRAGMENT_RE = re.compile(r"#[A-Za-z_][A-Za-z0-9_.:-]*")
_DATA_IMAGE_RE = re.compile(r"data:image/(?:png|jpeg);base64,[A-Za-z0-9+/]+={0,2}", re.IGNORECASE)
_META_URL_RE = re.compile(r"https?://[^\s/?#\"'<>\\][^\s\"'<>\\]*", re.IGNORECASE)

NAME_RE = re.compile(r"[a-z_][a-zA-Z0-9_-]*")
_ID_RE = re.compile(r"[a-z_][a-zA-Z0-9_.-]*")
_CLASS_RE = re.compile(r"[a-z_][a-zA-Z0-9_-]*(?:[ \t]+[a-z_][a-zA-Z0-9_-]*)*")
FONT_FAMILY_RE = re.compile(r"[A-Za-z0-9 _-]+")

_CSS_BLOCK_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\\"), "CSS escape sequence"),
    (re.compile(r"@\s*import", re.IGNORECASE), "@import"),
    (re.compile(r"@\s*font-face", re.IGNORECASE), "@font-face"),
    (re.compile(r"expression\s*\(", re.IGNORECASE), "expression()"),
    (re.compile(r"-moz-binding", re.IGNORECASE), "-moz-binding"),
    (re.compile(r"behavior\s*:", re.IGNORECASE), "behavior"),
    (re.compile(r"javascript\s*:", re.IGNORECASE), "javascript URI"),
    (re.compile(r"vbscript\s*:", re.IGNORECASE), "vbscript URI"),
    (re.compile(r"url\s+\(", re.IGNORECASE), "url with whitespace before parenthesis"),
    (re.compile(r"image-set\s*\(", re.IGNORECASE), "image-set()"),
    (re.compile(r"(?<![\w-])src\s*\(", re.IGNORECASE), "src()"),
    (re.compile(r"<"), "markup in CSS"),
)

_URL_FUNCTION_RE = re.compile(r"url\(", re.IGNORECASE)


def is_local_reference(value: Any) -> bool:
    """``#id`` pointing into the same document. The bare ``#`` is not a reference."""
    return isinstance(value, str) and _FRAGMENT_RE.fullmatch(value) is not None


def is_safe_url(value: Any) -> bool:
    """URL policy for ``href``: a local fragment or a base64 PNG/JPEG data URI."""
    if not isinstance(value, str):
        return False
    if is_local_reference(value):
        return True
    return _DATA_IMAGE_RE.fullmatch(value) is not None


def is_safe_meta_url(value: Any) -> bool:
    """URL policy for meta links: absolute ``http``/``https`` only."""
    return isinstance(value, str) and _META_URL_RE.fullmatch(value) is not None


def _url_argument_findings(text: str) -> List[str]:
    findings: List[str] = []
    for match in _URL_FUNCTION_RE.finditer(text):
        end = text.find(")", match.end())
        if end == -1:
            findings.append("unterminated url()")
            continue
        argument = text[match.end():end].strip()
        if len(argument) >= 2 and argument[0] == argument[-1] and argument[0] in "'\"":
            argument = argument[1:-1].strip()
        if not is_local_reference(argument):
            findings.append(f"non-local url({argument})")
    return findings


def css_findings(text: str) -> List[str]:
    """Return a label for every blocked construct found in CSS text."""
    findings = [label for pattern, label in _CSS_BLOCK_PATTERNS if pattern.search(text)]
    findings.extend(_url_argument_findings(text))
    return findings


def is_safe_css_value(value: Any) -> bool:
    return isinstance(value, str) and not css_findings(value)


def is_safe_name(value: Any) -> bool:
    """Names of components, variants and color groups, and references to them."""
    return isinstance(value, str) and NAME_RE.fullmatch(value) is not None


def is_safe_id(value: Any) -> bool:
    return isinstance(value, str) and _ID_RE.fullmatch(value) is not None


def is_safe_class(value: Any) -> bool:
    return isinstance(value, str) and _CLASS_RE.fullmatch(value) is not None


def is_safe_font_family(value: Any) -> bool:
    return isinstance(value, str) and FONT_FAMILY_RE.fullmatch(value) is not None


def is_reserved_key(key: Any) -> bool:
    return key in RESERVED_KEYS


def is_event_handler(key: str) -> bool:
    return key[:2].lower() == "on"


def is_namespace_attribute(key: str) -> bool:
    return key.lower().startswith(NAMESPACE_PREFIXES)


def is_allowed_element(name: Any) -> bool:
    return isinstance(name, str) and name in ALLOWED_ELEMENTS and name not in DANGEROUS_ELEMENTS


def is_allowed_attribute(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    if is_reserved_key(key) or is_event_handler(key) or is_namespace_attribute(key):
        return False
    return key in ATTRIBUTE_POLICIES
