"""MUS (DOOM music) header and event stream parsing.

See https://moddingwiki.shikadi.net/wiki/MUS_Format for the format.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List

from ..errors import invalid_lump

__all__ = [
    "MUS_MAGIC",
    "MUS_HEADER_SIZE",
    "MusHeader",
    "Mus",
    "parse_mus",
    "controller_as_midi",
    "EV_RELEASE_NOTE",
    "EV_PLAY_NOTE",
    "EV_PITCH_WHEEL",
    "EV_SYSTEM",
    "EV_CONTROLLER",
    "EV_MEASURE_END",
    "EV_SCORE_END",
]

MUS_MAGIC = b"MUS\x1a"
MUS_HEADER_SIZE = 16

EV_RELEASE_NOTE = 0
EV_PLAY_NOTE = 1
EV_PITCH_WHEEL = 2
EV_SYSTEM = 3
EV_CONTROLLER = 4
EV_MEASURE_END = 5
EV_SCORE_END = 6

# MUS controller number -> MIDI controller number (0 is a program change)
_CONTROLLERS = (0, 0, 1, 7, 10, 11, 91, 93, 64, 67, 120, 123, 126, 127, 121)


def controller_as_midi(value: int) -> int:
    if 0 <= value < len(_CONTROLLERS):
        return _CONTROLLERS[value]
    raise invalid_lump(f"unknown MUS controller {value}")


@dataclass(slots=True)
class MusHeader:
    magic: bytes = b"\x00" * 4
    song_len: int = 0
    song_start: int = 0
    channels: int = 0
    sec_channels: int = 0
    instr_count: int = 0
    dummy: int = 0
    instruments: List[int] = field(default_factory=list)


@dataclass(slots=True)
class Mus:
    header: MusHeader
    events: bytes


def parse_mus(buffer: bytes, lump_id: str = "") -> Mus:
    ctx = {"lump": lump_id}
    if len(buffer) < MUS_HEADER_SIZE:
        raise invalid_lump("MUS header truncated", ctx)
    values = struct.unpack_from("<4s6H", buffer, 0)
    header = MusHeader(*values)
    if header.magic != MUS_MAGIC:
        raise invalid_lump("not a MUS lump", ctx)
    instr_end = MUS_HEADER_SIZE + 2 * header.instr_count
    if instr_end > len(buffer):
        raise invalid_lump("MUS instrument list truncated", ctx)
    header.instruments = list(
        struct.unpack_from(f"<{header.instr_count}H", buffer, MUS_HEADER_SIZE)
    )
    if header.song_start > len(buffer):
        raise invalid_lump("MUS score starts past the payload", ctx)
    events = bytes(buffer[header.song_start : header.song_start + header.song_len])
    return Mus(header, events)
