"""Lump decoders, one class per content kind."""

from __future__ import annotations

from ..container.records import LumpData, LumpKind
from .base import Lump
from .flat import Flat
from .music import DoomMusic
from .palette import Palettes
from .patch import DoomImage
from .unknown import Unknown

__all__ = [
    "Lump",
    "Flat",
    "DoomImage",
    "DoomMusic",
    "Palettes",
    "Unknown",
    "decoder_for",
]


def decoder_for(data: LumpData, palettes: Palettes) -> Lump:
    """Wrap ``data`` with the decoder of its kind.

    Image kinds receive a value copy of ``palettes`` so later palette changes
    do not recolor them.
    """
    if data.kind is LumpKind.FLAT:
        return Flat(palettes.copy(), data)
    if data.kind is LumpKind.PATCH:
        return DoomImage(palettes.copy(), data)
    if data.kind is LumpKind.SOUND:
        return DoomMusic(data)
    if data.kind is LumpKind.PALETTE:
        return Palettes(data, palettes.index)
    return Unknown(data)
