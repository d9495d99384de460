from __future__ import annotations

from ..container.records import LumpKind
from .base import Lump


class Unknown(Lump):
    """Unidentified or marker lump: nothing to decode, nothing to export."""

    kind = LumpKind.UNKNOWN

    def decode(self) -> None:
        self._decoded = None
