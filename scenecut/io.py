"""
scenecut.io - JSON read/write helpers, atomic file writes.

Every file Scenecut writes into a project (storyboard, media, exports) goes
through an atomic temp-file-then-rename so an interrupted write never leaves
a truncated storyboard behind.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any


def _atomic_write(path: Path, payload: str | bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    binary = isinstance(payload, bytes)
    with tempfile.NamedTemporaryFile(
        mode="wb" if binary else "w",
        encoding=None if binary else "utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(payload)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def read_json(path: Path) -> dict[str, Any]:
    """Read JSON file with UTF-8 encoding.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: dict[str, Any], indent: int = 2) -> None:
    """Write JSON file atomically with pretty formatting."""
    _atomic_write(path, json.dumps(data, indent=indent, ensure_ascii=False) + "\n")


def write_text(path: Path, content: str) -> None:
    """Write text file atomically."""
    _atomic_write(path, content)


def write_bytes(path: Path, data: bytes) -> None:
    """Write binary file atomically."""
    _atomic_write(path, data)
