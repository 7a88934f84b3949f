"""File utilities."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_json_file(path: str) -> Any:
    """Load a JSON document from disk.

    - Missing files raise FileNotFoundError.
    - Undecodable or malformed content raises ValueError so callers can report it.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError(f"Not a UTF-8 text file: {p.name}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {p.name}: {exc}") from exc
