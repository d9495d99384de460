"""Binary WAD inspection utilities.

Public functions:
- inspect_wad(path) -> dict
- inspect_wad_bytes(data) -> dict
- validate_wad(info) -> list[str]

Inspection reads the header and directory table only; payloads are not
classified or decoded.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List
import struct

from .constants import (
    DIRECTORY_ENTRY_SIZE,
    ENTRY_STRUCT,
    HEADER_SIZE,
    HEADER_STRUCT,
)
from ..utils.io import safe_read_file
from .records import WadKind, ascii_filter

__all__ = [
    "inspect_wad",
    "inspect_wad_bytes",
    "validate_wad",
    "parse_header",
]


def _read_exact(data: bytes, offset: int, size: int, label: str) -> bytes:
    end = offset + size
    if offset < 0 or end > len(data):
        raise ValueError(
            f"Out of range read for {label}: {offset}+{size}>{len(data)}"
        )
    return data[offset:end]


def parse_header(data: bytes) -> Dict[str, Any]:
    raw = _read_exact(data, 0, HEADER_SIZE, "header")
    magic, num_lumps, dir_pos = struct.unpack_from(HEADER_STRUCT, raw, 0)
    kind = WadKind.from_magic(magic)
    return {
        "magic": ascii_filter(magic),
        "magic_ok": kind is not WadKind.UNKNOWN,
        "kind": kind.name,
        "num_lumps": num_lumps,
        "dir_pos": dir_pos,
    }


def inspect_wad_bytes(data: bytes) -> Dict[str, Any]:
    result: Dict[str, Any] = {"file_size": len(data)}
    if len(data) < HEADER_SIZE:
        result["header"] = None
        return result
    header = parse_header(data)
    result["header"] = header
    dir_pos = header["dir_pos"]
    num_lumps = header["num_lumps"]
    dir_end = dir_pos + num_lumps * DIRECTORY_ENTRY_SIZE
    if num_lumps >= 0 and dir_pos >= 0 and dir_end <= len(data):
        entries = []
        for i in range(num_lumps):
            raw = _read_exact(
                data, dir_pos + i * DIRECTORY_ENTRY_SIZE, DIRECTORY_ENTRY_SIZE, f"dir[{i}]"
            )
            pos, size, name = struct.unpack_from(ENTRY_STRUCT, raw, 0)
            entries.append({"name": ascii_filter(name), "pos": pos, "size": size})
        result["directory_entries"] = entries
    return result


def inspect_wad(path: str | Path) -> Dict[str, Any]:
    return inspect_wad_bytes(safe_read_file(Path(path)))


def validate_wad(info: Dict[str, Any]) -> List[str]:
    issues: List[str] = []
    header = info.get("header")
    if header is None:
        issues.append("File too small for a WAD header")
        return issues
    if not header["magic_ok"]:
        issues.append(f"Unknown magic {header['magic']!r}")
    file_size = info["file_size"]
    if header["num_lumps"] < 0:
        issues.append("Negative lump count")
    if header["dir_pos"] < 0 or header["dir_pos"] > file_size:
        issues.append("Directory offset outside the file")
    elif "directory_entries" not in info:
        issues.append("Directory exceeds file size")
    for i, e in enumerate(info.get("directory_entries", [])):
        if e["size"] < 0 or e["pos"] < 0:
            issues.append(f"Lump {e['name']!r} (#{i}) has a negative offset or size")
        elif e["pos"] + e["size"] > file_size:
            issues.append(f"Lump {e['name']!r} (#{i}) exceeds file size")
    return issues
