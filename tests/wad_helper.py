from __future__ import annotations

"""Synthetic WAD builders for wadkit tests.

Usage:
    from wad_helper import build_wad, lump
    data = build_wad([lump("PLAYPAL", palette_bytes()), lump("F_START")])

Payloads are laid out right after the header; the directory goes last, the
way DOOM tools usually write it. ``alias_of`` makes an entry reuse the offset
of an earlier one.
"""
import struct
from dataclasses import dataclass
from typing import Iterable, Optional

HEADER = "<4sii"
ENTRY = "<ii8s"


@dataclass
class LumpEntry:
    name: str
    data: bytes = b""
    alias_of: Optional[int] = None


def lump(name: str, data: bytes = b"", alias_of: int | None = None) -> LumpEntry:
    return LumpEntry(name, data, alias_of)


def build_wad(lumps: Iterable[LumpEntry], magic: bytes = b"PWAD") -> bytes:
    lumps = list(lumps)
    payload = bytearray()
    positions: list[int] = []
    for entry in lumps:
        if entry.alias_of is not None:
            positions.append(positions[entry.alias_of])
            continue
        positions.append(12 + len(payload))
        payload += entry.data
    dir_pos = 12 + len(payload)
    out = bytearray(struct.pack(HEADER, magic, len(lumps), dir_pos))
    out += payload
    for entry, pos in zip(lumps, positions):
        size = len(lumps[entry.alias_of].data) if entry.alias_of is not None else len(entry.data)
        out += struct.pack(ENTRY, pos, size, entry.name.encode("ascii"))
    return bytes(out)


def read_directory(data: bytes) -> list[tuple[int, int, str]]:
    """``(pos, size, name)`` for every directory entry of ``data``."""
    _, count, dir_pos = struct.unpack_from(HEADER, data, 0)
    entries = []
    for i in range(count):
        pos, size, name = struct.unpack_from(ENTRY, data, dir_pos + 16 * i)
        entries.append((pos, size, name.rstrip(b"\x00").decode("ascii")))
    return entries


def palette_bytes(count: int = 1, shift: int = 0) -> bytes:
    """``count`` palettes; color i of palette p is (i+p+shift, i, 255-i)."""
    out = bytearray()
    for p in range(count):
        for i in range(256):
            out += bytes(((i + p + shift) % 256, i, 255 - i))
    return bytes(out)


def flat_bytes(index: int = 1) -> bytes:
    return bytes([index]) * 4096


def patch_bytes(width: int, height: int, fill: int = 1) -> bytes:
    """Picture with one full-height post per column."""
    header = struct.pack("<HHhh", width, height, 0, 0)
    table_size = 4 * width
    column = bytes([0, height, 0]) + bytes([fill]) * height + bytes([0, 0xFF])
    offsets = [8 + table_size + x * len(column) for x in range(width)]
    return header + struct.pack(f"<{width}I", *offsets) + column * width


def mus_bytes(events: bytes, instruments: tuple[int, ...] = (0,)) -> bytes:
    start = 16 + 2 * len(instruments)
    header = struct.pack(
        "<4s6H", b"MUS\x1a", len(events), start, 1, 0, len(instruments), 0
    )
    return header + struct.pack(f"<{len(instruments)}H", *instruments) + events
