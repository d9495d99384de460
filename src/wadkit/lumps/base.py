"""Lump capability contract shared by every decoder.

A lump owns a :class:`LumpData` copy (payload, metadata, kind). Decoders
populate ``_decoded`` from that payload; a failed decode is stored on the lump
instead of being raised so one malformed lump never blocks the rest of a
directory. Reading :attr:`Lump.decoded` re-raises the stored error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from ..container.records import LumpData, LumpInfo, LumpKind
from ..errors import E_UNSUPPORTED, WadError, UnsupportedOperationError
from ..logging import get_logger

__all__ = ["Lump"]


class Lump:
    kind: LumpKind = LumpKind.UNKNOWN
    # File suffix used by persist(); None means nothing to export
    extension: Optional[str] = None

    def __init__(self, data: LumpData):
        self.data = data
        self.error: Optional[WadError] = None
        self._decoded: Any = None

    # Identity -----------------------------------------------------------------
    @property
    def metadata(self) -> LumpInfo:
        return self.data.metadata

    @property
    def id(self) -> str:
        return self.data.metadata.id_ascii()

    @property
    def name(self) -> str:
        return self.data.metadata.name_ascii()

    # Decoding -----------------------------------------------------------------
    def decode(self) -> None:
        """Populate the decoded representation; raise on malformed payloads."""
        raise NotImplementedError

    def try_decode(self) -> bool:
        self.error = None
        try:
            self.decode()
        except WadError as exc:
            self.error = exc
            self._decoded = None
            get_logger().warning(
                "Unable to decode lump %s (%s): %s",
                self.id,
                self.data.kind.name,
                exc.message,
            )
            return False
        return True

    @property
    def decoded(self) -> Any:
        if self.error is not None:
            raise self.error
        return self._decoded

    # Persistence --------------------------------------------------------------
    def write_artifact(self, path: Path) -> None:
        raise NotImplementedError

    def persist(self, directory: str | Path) -> Optional[Path]:
        """Write the derived artifact into ``directory`` (best effort)."""
        if self.extension is None:
            return None
        path = Path(directory) / f"{self.id}.{self.extension}"
        try:
            self.write_artifact(path)
        except (OSError, ValueError, WadError) as exc:
            get_logger().warning("Unable to save %s: %s", path.name, exc)
            return None
        return path

    def persist_raw(self, directory: str | Path) -> Optional[Path]:
        path = Path(directory) / f"{self.id}.raw"
        try:
            path.write_bytes(self.data.buffer)
        except OSError as exc:
            get_logger().warning("Unable to save %s: %s", path.name, exc)
            return None
        return path

    # Snapshots ----------------------------------------------------------------
    def snapshot(self) -> LumpData:
        return self.data.copy()

    def replace_snapshot(self, data: LumpData) -> None:
        self.data = data.copy()

    def reencode(self, buffer: bytes) -> None:
        raise UnsupportedOperationError(
            code=E_UNSUPPORTED,
            message=f"Re-encoding {self.data.kind.name.lower()} lumps is not supported",
            context={"lump": self.id, "size": len(buffer)},
        )

    # Display ------------------------------------------------------------------
    def details(self) -> str:
        return ""

    def describe(self) -> str:
        info = self.data.metadata
        text = f"Name: {self.id}, Size: {info.size}, Offset: {info.pos}"
        extra = self.details() if self.error is None else ""
        if extra:
            text += f", {extra}"
        if self.error is not None:
            text += f", Error: {self.error.message}"
        return text

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id!r}, kind={self.data.kind.name}, "
            f"size={self.data.metadata.size}, state={self.data.metadata.state.name})"
        )
