"""WAD controller: load, select, export, edit and rebuild a container."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Pattern

from .container.constants import DEFAULT_RE_NAME, HEADER_SIZE
from .container.directory import LumpsDirectory, compile_pattern
from .container.planner import RebuildPlan, compute_rebuild_plan
from .container.records import LumpAdd, LumpData, LumpState, WadInfo, WadKind
from .container.writer import write_wad
from .errors import E_LOAD, E_TYPE, WadLoadError, WadTypeError
from .logging import get_logger
from .lumps import Lump
from .reporting import get_reporter
from .utils.io import safe_read_file

__all__ = ["Wad"]


class Wad:
    """A loaded container plus the lump selection used by bulk operations.

    The source buffer is retained untouched; edits live in the directory and
    only reach bytes through :meth:`dest`.
    """

    def __init__(self) -> None:
        self.info = WadInfo()
        self.src: bytes = b""
        self.re_name: Pattern[str] = compile_pattern(DEFAULT_RE_NAME)
        self.dir = LumpsDirectory()

    # Settings -----------------------------------------------------------------
    def set_palette(self, value: int) -> None:
        """Palette used for lumps classified from now on (see :meth:`reload`)."""
        self.dir.set_palette(value)

    def set_kind(self, value: WadKind) -> None:
        self.info.kind = value

    def select(self, pattern: str) -> None:
        self.re_name = compile_pattern(pattern)

    # Loading ------------------------------------------------------------------
    def load(self, buffer: bytes) -> None:
        buffer = bytes(buffer)
        if len(buffer) < HEADER_SIZE:
            raise WadLoadError(
                code=E_LOAD,
                message="The file size is too small.",
                context={"size": len(buffer)},
            )
        info = WadInfo.from_bytes(buffer)
        if info.kind is WadKind.UNKNOWN:
            raise WadTypeError(
                code=E_TYPE,
                message="The file is not a WAD file.",
                context={"magic": buffer[:4].hex()},
            )
        self.dir.parse(info, buffer)
        self.info = info
        self.src = buffer
        get_logger().debug(
            "Loaded %s: %d lumps, directory at %d",
            info.kind.name,
            info.num_lumps,
            info.dir_pos,
        )

    def load_from_file(self, path: str | Path) -> None:
        self.load(safe_read_file(path))

    def reload(self) -> None:
        """Re-parse the retained source buffer; discards edits."""
        self.load(self.src)

    # Queries ------------------------------------------------------------------
    def lump(self, lump_id: str) -> Optional[Lump]:
        return self.dir.lookup(lump_id)

    @property
    def lumps(self) -> List[Lump]:
        return list(self.dir.lumps)

    def selected(self) -> List[Lump]:
        return self.dir.select(self.re_name)

    def dump(self) -> List[str]:
        return [lump.describe() for lump in self.selected()]

    # Export -------------------------------------------------------------------
    def _export(self, directory: str | Path, raw: bool) -> int:
        out = Path(directory)
        out.mkdir(parents=True, exist_ok=True)
        lumps = self.selected()
        rep = get_reporter()
        rep.start_task("export.lumps", "Export lumps", total=len(lumps))
        saved = 0
        for lump in lumps:
            path = lump.persist_raw(out) if raw else lump.persist(out)
            if path is not None:
                saved += 1
            rep.advance("export.lumps")
        rep.end_task("export.lumps", lumps=saved, failed=len(lumps) - saved)
        return saved

    def save_lumps(self, directory: str | Path) -> int:
        """Write decoded artifacts of the selected lumps; return files written."""
        return self._export(directory, raw=False)

    def save_lumps_raw(self, directory: str | Path) -> int:
        return self._export(directory, raw=True)

    # Edits --------------------------------------------------------------------
    def remove(self) -> int:
        return self.dir.tombstone(self.re_name)

    def remove_by_name(self, pattern: str) -> int:
        return self.dir.tombstone(pattern)

    def update_lumps_raw(self, buffer: bytes) -> int:
        """Replace the payload of every selected live lump with ``buffer``."""
        payload = bytes(buffer)

        def update(data: LumpData) -> Optional[LumpData]:
            if not data.metadata.state.is_alive():
                return None
            data.buffer = payload
            data.metadata.size = len(payload)
            data.metadata.state = LumpState.UPDATED
            return data

        count = self.dir.select_mut(self.re_name, update)
        for lump in self.selected():
            if lump.metadata.state is LumpState.UPDATED:
                lump.try_decode()
        return count

    def update_lumps(self, buffer: bytes) -> int:
        count = 0
        for lump in self.selected():
            lump.reencode(buffer)
            count += 1
        return count

    def add_lump_raw(self, add: LumpAdd) -> str:
        return self.dir.insert(add)

    # Rebuild ------------------------------------------------------------------
    def plan(self) -> RebuildPlan:
        return compute_rebuild_plan(self.info, self.dir)

    def dest(self) -> bytes:
        """Rebuilt container bytes reflecting the current lump states."""
        return write_wad(self.plan())

    def save(self, path: str | Path) -> int:
        data = self.dest()
        Path(path).write_bytes(data)
        return len(data)
