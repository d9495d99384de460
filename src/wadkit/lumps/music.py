from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..container.records import LumpData, LumpKind
from .base import Lump
from .midi import MIDI_MAGIC, mus_to_midi
from .mus import Mus, parse_mus

__all__ = ["DoomMusic"]


class DoomMusic(Lump):
    """``D_*`` music lump; decoded into a Standard MIDI File."""

    kind = LumpKind.SOUND
    extension = "mid"

    def __init__(self, data: LumpData):
        super().__init__(data)
        self.mus: Optional[Mus] = None

    def decode(self) -> None:
        buffer = self.data.buffer
        if buffer[:4] == MIDI_MAGIC:
            self.mus = None
            self._decoded = bytes(buffer)
            return
        self.mus = parse_mus(buffer, self.id)
        self._decoded = mus_to_midi(self.mus, self.id)

    def write_artifact(self, path: Path) -> None:
        path.write_bytes(self.decoded)

    def details(self) -> str:
        if self.mus is None:
            return "Format: MIDI" if self._decoded is not None else ""
        header = self.mus.header
        return (
            f"Channels: {header.channels}, {header.sec_channels}, "
            f"Instruments: {header.instr_count}"
        )
