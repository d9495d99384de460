"""IO helpers for container files and edit-script payloads."""

from __future__ import annotations
from pathlib import Path
from typing import Any

from ..errors import read_error, script_error
from .paths import safe_file_path

__all__ = ["safe_read_file", "read_payload", "MAX_FILE_SIZE"]

MAX_FILE_SIZE = 512 * 1024 * 1024
MAX_HEX_STRING_LENGTH = 2 * 1024 * 1024
PAYLOAD_SOURCES = ("data_hex", "file", "path", "data")


def safe_read_file(path: str | Path, max_size: int = MAX_FILE_SIZE) -> bytes:
    p = Path(path)
    if not p.is_file():
        raise read_error(f"File not found: {p}", {"path": str(p)})
    size = p.stat().st_size
    if size > max_size:
        raise read_error(f"File too large: {size}>{max_size}", {"path": str(p)})
    try:
        return p.read_bytes()
    except OSError as e:
        raise read_error(f"Unable to read {p}: {e}", {"path": str(p)}) from e


def read_payload(
    entry: dict[str, Any], base_dir: Path, max_size: int = MAX_FILE_SIZE
) -> bytes:
    """Payload of an edit-script step.

    Exactly one of ``data_hex`` / ``file`` / ``path`` / ``data``; none at all
    means a zero-length payload (markers).
    """
    # A null file/path counts as "not provided"
    sources = [
        key
        for key in PAYLOAD_SOURCES
        if key in entry and entry.get(key) is not None
    ]
    if not sources:
        return b""
    if len(sources) > 1:
        raise script_error(f"Multiple data sources: {sources}")
    src = sources[0]
    if src == "data_hex":
        raw = entry["data_hex"]
        if not isinstance(raw, str):
            raise script_error("data_hex must be string")
        h = raw.replace(" ", "").replace("\n", "")
        if len(h) > MAX_HEX_STRING_LENGTH:
            raise script_error("hex string too long")
        if len(h) % 2:
            raise script_error("hex string must have even length")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise script_error(f"invalid hex: {e}") from e
    if src in ("file", "path"):
        p = entry[src]
        if not isinstance(p, str):
            raise script_error(f"{src} path must be string")
        try:
            resolved = safe_file_path(base_dir, p)
        except ValueError as e:
            raise script_error(
                f"{src} escapes the script directory: {p}", {src: p}
            ) from e
        return safe_read_file(resolved, max_size)
    # src == 'data'
    d = entry["data"]
    if isinstance(d, str):
        return d.encode("utf-8")
    if isinstance(d, bytes):
        return d
    raise script_error("data must be str or bytes")
