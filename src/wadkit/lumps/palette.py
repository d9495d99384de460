"""PLAYPAL decoding: a stack of 256-color RGB palettes."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from PIL import Image

from ..container.constants import (
    MAX_PALETTES,
    PALETTE_COLORS,
    PALETTE_LUMP,
    PALETTE_SIZE,
)
from ..container.records import LumpData, LumpInfo, LumpKind
from ..errors import invalid_lump
from .base import Lump

__all__ = ["Palettes", "indexed_to_rgba"]

_SWATCH_SCALE = 8


def indexed_to_rgba(indices: Iterable[Optional[int]], palette: bytes) -> bytes:
    """Resolve palette indices to RGBA; ``None`` becomes fully transparent."""
    out = bytearray()
    for index in indices:
        if index is None:
            out += b"\x00\x00\x00\x00"
            continue
        start = index * 3
        out += palette[start : start + 3]
        out.append(255)
    return bytes(out)


class Palettes(Lump):
    kind = LumpKind.PALETTE
    extension = "png"

    def __init__(self, data: LumpData, index: int = 0):
        super().__init__(data)
        self.palettes: List[bytes] = []
        self.index = index

    @classmethod
    def empty(cls) -> "Palettes":
        info = LumpInfo.new(0, 0, PALETTE_LUMP)
        info.set_id(PALETTE_LUMP)
        return cls(LumpData(b"", info, LumpKind.PALETTE))

    def copy(self) -> "Palettes":
        """Value copy; later changes to ``self`` do not reach the copy."""
        clone = Palettes(self.data.copy(), self.index)
        clone.palettes = list(self.palettes)
        clone.error = self.error
        clone._decoded = clone.palettes if self._decoded is not None else None
        return clone

    def known_count(self) -> int:
        return len(self.palettes) or MAX_PALETTES

    def set_index(self, value: int) -> None:
        self.index = value % self.known_count()

    def palette(self, n: Optional[int] = None) -> Optional[bytes]:
        if not self.palettes:
            return None
        n = self.index if n is None else n
        return self.palettes[n % len(self.palettes)]

    def decode(self) -> None:
        buffer = self.data.buffer
        count = len(buffer) // PALETTE_SIZE
        if count == 0:
            raise invalid_lump(
                f"PLAYPAL holds {len(buffer)} bytes, expected at least {PALETTE_SIZE}",
                {"lump": self.id},
            )
        # Rebuilt from scratch on every decode
        self.palettes = [
            bytes(buffer[i * PALETTE_SIZE : (i + 1) * PALETTE_SIZE])
            for i in range(count)
        ]
        self._decoded = self.palettes

    def write_artifact(self, path: Path) -> None:
        palettes = self.decoded
        if not palettes:
            raise ValueError("no palette decoded")
        # One 16x16 block per palette, stacked vertically
        side = 16
        sheet = b"".join(
            indexed_to_rgba(range(PALETTE_COLORS), pal) for pal in palettes
        )
        image = Image.frombytes("RGBA", (side, side * len(palettes)), sheet)
        image = image.resize(
            (side * _SWATCH_SCALE, side * len(palettes) * _SWATCH_SCALE),
            Image.Resampling.NEAREST,
        )
        image.save(path)

    def details(self) -> str:
        return f"Palettes: {len(self.palettes)}, Active: {self.index}"
