"""Shared helpers for the packaging services — errors, paths, JSON files."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class PackagingError(Exception):
    """Raised when a packaging step cannot complete."""


def resolve_inside(base: Path, relative: str) -> Path:
    """Resolve ``relative`` under ``base``, refusing paths that escape it."""
    if not relative or Path(relative).is_absolute():
        raise PackagingError(f"Expected a relative path, got {relative!r}")
    base = base.resolve()
    target = (base / relative).resolve()
    if target == base:
        raise PackagingError(f"Path {relative!r} refers to the package root itself")
    try:
        target.relative_to(base)
    except ValueError:
        raise PackagingError(f"Path {relative!r} escapes {base}") from None
    return target


def remove_path(path: Path) -> bool:
    """Delete a file, symlink or directory tree. Returns False if nothing was there."""
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False


def read_json(path: Path) -> dict[str, Any]:
    """Load a JSON object from disk."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise PackagingError(f"File not found: {path}") from None
    except UnicodeDecodeError as e:
        raise PackagingError(f"Cannot decode {path} as UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise PackagingError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise PackagingError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def write_json(path: Path, data: dict[str, Any]) -> None:
    """Write a JSON object with 2-space indentation, keeping key order."""
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
