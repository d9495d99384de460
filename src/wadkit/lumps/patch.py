"""DOOM picture format (patches, sprites, TITLEPIC).

Layout: ``<HHhh`` width, height, left offset, top offset, then ``width``
u32 column offsets. Each column is a run of posts terminated by ``0xFF``;
a post is ``topdelta``, ``length``, one pad byte, ``length`` palette indices
and a trailing pad byte. Pixels not covered by any post are transparent.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from PIL import Image

from ..container.constants import PATCH_HEADER_SIZE, PATCH_POST_END
from ..container.records import LumpData, LumpKind
from ..errors import invalid_lump
from .base import Lump
from .palette import Palettes, indexed_to_rgba

__all__ = ["PatchImage", "DoomImage", "decode_columns"]


@dataclass(slots=True)
class PatchImage:
    width: int
    height: int
    left: int
    top: int
    pixels: List[Optional[int]]
    rgba: bytes


def decode_columns(buffer: bytes, lump_id: str = "") -> PatchImage:
    """Walk the column table of ``buffer``; colors are resolved by the caller."""
    ctx = {"lump": lump_id}
    if len(buffer) < PATCH_HEADER_SIZE:
        raise invalid_lump("picture header truncated", ctx)
    width, height, left, top = struct.unpack_from("<HHhh", buffer, 0)
    table_end = PATCH_HEADER_SIZE + 4 * width
    if table_end > len(buffer):
        raise invalid_lump(
            f"column table ({width} columns) runs past the payload", ctx
        )
    columns = struct.unpack_from(f"<{width}I", buffer, PATCH_HEADER_SIZE)
    pixels: List[Optional[int]] = [None] * (width * height)
    size = len(buffer)

    for x, pos in enumerate(columns):
        while True:
            if pos >= size:
                raise invalid_lump(f"column {x} runs past the payload", ctx)
            row_start = buffer[pos]
            if row_start == PATCH_POST_END:
                break
            if pos + 3 > size:
                raise invalid_lump(f"post header in column {x} truncated", ctx)
            count = buffer[pos + 1]
            start = pos + 3
            end = start + count
            if end > size:
                raise invalid_lump(f"post in column {x} runs past the payload", ctx)
            if row_start + count > height:
                raise invalid_lump(
                    f"post in column {x} exceeds picture height {height}", ctx
                )
            for j, index in enumerate(buffer[start:end]):
                pixels[(row_start + j) * width + x] = index
            pos = end + 1

    return PatchImage(width, height, left, top, pixels, b"")


class DoomImage(Lump):
    kind = LumpKind.PATCH
    extension = "png"

    def __init__(self, palettes: Palettes, data: LumpData):
        super().__init__(data)
        self.palettes = palettes

    def decode(self) -> None:
        image = decode_columns(self.data.buffer, self.id)
        palette = self.palettes.palette()
        if palette is None:
            raise invalid_lump("no palette available", {"lump": self.id})
        image.rgba = indexed_to_rgba(image.pixels, palette)
        self._decoded = image

    def write_artifact(self, path: Path) -> None:
        image: PatchImage = self.decoded
        if image.width == 0 or image.height == 0:
            raise ValueError("empty picture")
        Image.frombytes("RGBA", (image.width, image.height), image.rgba).save(path)

    def details(self) -> str:
        image: Optional[PatchImage] = self._decoded
        if image is None:
            return ""
        return f"Width: {image.width}, Height: {image.height}"
