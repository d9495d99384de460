"""Path utilities (safe resolution)."""

from __future__ import annotations
from pathlib import Path

__all__ = ["safe_file_path", "edited_output_path"]


def safe_file_path(base_dir: Path, file_path: str) -> Path:
    base_dir = base_dir.resolve()
    resolved = (base_dir / file_path).resolve()
    resolved.relative_to(base_dir)  # raises ValueError if escapes
    return resolved


def edited_output_path(source: Path, directory: Path | None = None) -> Path:
    """``<directory or source dir>/<stem>.edited.wad``."""
    parent = directory if directory is not None else source.parent
    return parent / f"{source.stem}.edited.wad"
