from __future__ import annotations

from pathlib import Path

from PIL import Image

from ..container.constants import FLAT_HEIGHT, FLAT_SIZE, FLAT_WIDTH
from ..container.records import LumpData, LumpKind
from ..errors import invalid_lump
from .base import Lump
from .palette import Palettes, indexed_to_rgba

__all__ = ["Flat"]


class Flat(Lump):
    """64x64 floor/ceiling tile stored as raw palette indices."""

    kind = LumpKind.FLAT
    extension = "png"

    def __init__(self, palettes: Palettes, data: LumpData):
        super().__init__(data)
        self.palettes = palettes

    def decode(self) -> None:
        buffer = self.data.buffer
        if len(buffer) < FLAT_SIZE:
            raise invalid_lump(
                f"flat holds {len(buffer)} bytes, expected {FLAT_SIZE}",
                {"lump": self.id},
            )
        palette = self.palettes.palette()
        if palette is None:
            raise invalid_lump("no palette available", {"lump": self.id})
        self._decoded = indexed_to_rgba(buffer[:FLAT_SIZE], palette)

    def write_artifact(self, path: Path) -> None:
        Image.frombytes("RGBA", (FLAT_WIDTH, FLAT_HEIGHT), self.decoded).save(path)

    def details(self) -> str:
        return f"Width: {FLAT_WIDTH}, Height: {FLAT_HEIGHT}"
