"""Collects violations along a traversal and turns them into a report."""
from __future__ import annotations

from typing import List, Union

from avatarguard.models.report import ValidationReport, Violation, ViolationCode


def escape_pointer_token(token: Union[str, int]) -> str:
    return str(token).replace("~", "~0").replace("/", "~1")


def join_pointer(base: str, *tokens: Union[str, int]) -> str:
    """Extend a JSON Pointer; the root document is the empty pointer ``""``."""
    for token in tokens:
        base = f"{base}/{escape_pointer_token(token)}"
    return base


class ViolationCollector:
    """Ordered, append-only list of violations for a single validation call."""

    def __init__(self) -> None:
        self._violations: List[Violation] = []

    def add(self, path: str, code: ViolationCode, message: str) -> None:
        self._violations.append(
            Violation(path=path, code=code, category=code.category, message=message)
        )

    @property
    def violations(self) -> List[Violation]:
        return list(self._violations)

    def __len__(self) -> int:
        return len(self._violations)

    def __bool__(self) -> bool:
        return bool(self._violations)

    def report(self) -> ValidationReport:
        return ValidationReport.from_violations(self._violations)
