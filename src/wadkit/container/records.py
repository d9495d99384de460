"""Record model: container header, directory entries and lump state.

All on-disk integers are little-endian signed 32-bit values. Names are 8 raw
bytes padded with NUL; ids are 12 bytes and only exist in memory.
"""

from __future__ import annotations

import string
import struct
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional

from .constants import (
    DIRECTORY_ENTRY_SIZE,
    ENTRY_STRUCT,
    HEADER_STRUCT,
    LUMP_ID_SIZE,
    LUMP_NAME_SIZE,
    MAGIC_IWAD,
    MAGIC_PWAD,
    RE_VIRTUAL_MARKER,
)
from ..errors import invalid_lump

__all__ = [
    "WadKind",
    "WadInfo",
    "LumpKind",
    "LumpState",
    "LumpInfo",
    "LumpData",
    "Placement",
    "LumpAdd",
    "ascii_filter",
]

_PRINTABLE = frozenset(string.ascii_letters + string.digits + string.punctuation)


def ascii_filter(raw: bytes) -> str:
    """Keep only alphanumeric / punctuation ASCII characters of ``raw``."""
    return "".join(c for c in raw.decode("latin-1") if c in _PRINTABLE)


class WadKind(Enum):
    IWAD = auto()
    PWAD = auto()
    UNKNOWN = auto()

    @classmethod
    def from_magic(cls, magic: bytes) -> "WadKind":
        if magic == MAGIC_IWAD:
            return cls.IWAD
        if magic == MAGIC_PWAD:
            return cls.PWAD
        return cls.UNKNOWN

    @property
    def magic(self) -> bytes:
        if self is WadKind.IWAD:
            return MAGIC_IWAD
        if self is WadKind.PWAD:
            return MAGIC_PWAD
        return b"\x00" * 4


@dataclass(slots=True)
class WadInfo:
    """Container header (12 bytes)."""

    kind: WadKind = WadKind.UNKNOWN
    num_lumps: int = 0
    dir_pos: int = 0

    @classmethod
    def from_bytes(cls, raw: bytes) -> "WadInfo":
        magic, num_lumps, dir_pos = struct.unpack_from(HEADER_STRUCT, raw, 0)
        return cls(WadKind.from_magic(magic), num_lumps, dir_pos)

    def to_bytes(self) -> bytes:
        return struct.pack(
            HEADER_STRUCT, self.kind.magic, self.num_lumps, self.dir_pos
        )


class LumpKind(Enum):
    FLAT = auto()
    PATCH = auto()
    SOUND = auto()
    PALETTE = auto()
    UNKNOWN = auto()


class LumpState(Enum):
    DEFAULT = auto()
    DELETED = auto()
    UPDATED = auto()

    def is_alive(self) -> bool:
        return self is not LumpState.DELETED


def _fixed(value: bytes, size: int) -> bytes:
    return value[:size] + b"\x00" * (size - len(value[:size]))


@dataclass(slots=True)
class LumpInfo:
    """Directory entry plus the in-memory ``id`` and ``state`` fields."""

    pos: int
    size: int
    name: bytes
    id: bytes = b"\x00" * LUMP_ID_SIZE
    state: LumpState = LumpState.DEFAULT

    def __post_init__(self) -> None:
        self.name = _fixed(self.name, LUMP_NAME_SIZE)
        self.id = _fixed(self.id, LUMP_ID_SIZE)

    @classmethod
    def new(cls, pos: int, size: int, name: str) -> "LumpInfo":
        return cls(pos, size, name.encode("ascii"))

    @classmethod
    def from_bytes(cls, raw: bytes, offset: int = 0) -> "LumpInfo":
        pos, size, name = struct.unpack_from(ENTRY_STRUCT, raw, offset)
        return cls(pos, size, name)

    def to_bytes(self, pos: Optional[int] = None) -> bytes:
        entry = struct.pack(
            ENTRY_STRUCT,
            self.pos if pos is None else pos,
            self.size,
            self.name,
        )
        if len(entry) != DIRECTORY_ENTRY_SIZE:  # pragma: no cover
            raise RuntimeError("Directory entry size mismatch")
        return entry

    def name_ascii(self) -> str:
        return ascii_filter(self.name)

    def id_ascii(self) -> str:
        return ascii_filter(self.id)

    def set_id(self, value: str) -> None:
        self.id = _fixed(value.encode("ascii"), LUMP_ID_SIZE)

    def is_virtual(self) -> bool:
        return RE_VIRTUAL_MARKER.fullmatch(self.name_ascii()) is not None

    def copy(self) -> "LumpInfo":
        return replace(self)


@dataclass(slots=True)
class LumpData:
    """Owned payload + metadata + kind; the unit exchanged by snapshots."""

    buffer: bytes
    metadata: LumpInfo
    kind: LumpKind = LumpKind.UNKNOWN

    def copy(self) -> "LumpData":
        return LumpData(bytes(self.buffer), self.metadata.copy(), self.kind)


class Placement(Enum):
    FRONT = auto()
    BACK = auto()
    BEFORE = auto()
    AFTER = auto()

    @classmethod
    def parse(cls, value: str) -> "Placement":
        return cls[value.strip().upper()]


@dataclass(slots=True)
class LumpAdd:
    """Insertion request consumed once by ``LumpsDirectory.insert``."""

    name: str
    buffer: bytes = b""
    placement: Placement = Placement.BACK
    anchor: Optional[str] = None
    kind: LumpKind = LumpKind.UNKNOWN

    def name_bytes(self) -> bytes:
        try:
            raw = self.name.encode("ascii")
        except UnicodeEncodeError:
            raw = b""
        if not raw or len(raw) > LUMP_NAME_SIZE:
            raise invalid_lump(
                f"Lump name must be 1..{LUMP_NAME_SIZE} ASCII bytes: {self.name!r}",
                {"name": self.name},
            )
        return raw

