"""Lumps directory: classified lump values in on-disk order."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Pattern

from ..errors import (
    E_INVALID_REGEX,
    E_LOAD,
    E_LUMP_NOT_FOUND,
    InvalidRegexError,
    LumpNotFoundError,
    WadLoadError,
)
from ..logging import get_logger
from ..lumps import Lump, Palettes, decoder_for
from ..reporting import get_reporter
from .classifier import ParseState, assign_id, classify
from .constants import DIRECTORY_ENTRY_SIZE
from .records import (
    LumpAdd,
    LumpData,
    LumpInfo,
    LumpKind,
    LumpState,
    Placement,
    WadInfo,
)

__all__ = ["LumpsDirectory", "compile_pattern"]


def compile_pattern(pattern: str | Pattern[str]) -> Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidRegexError(
            code=E_INVALID_REGEX,
            message=f"Invalid regular expression {pattern!r}: {exc}",
            context={"pattern": pattern},
        ) from exc


class LumpsDirectory:
    """Append-ordered lump values plus the active palette.

    Entries are never removed; deletion is a state change (tombstone) so
    indices stay stable until the container is rebuilt.
    """

    def __init__(self) -> None:
        self.lumps: List[Lump] = []
        self.pal: Palettes = Palettes.empty()

    def __len__(self) -> int:
        return len(self.lumps)

    def __iter__(self):
        return iter(self.lumps)

    # Parsing ------------------------------------------------------------------
    def _read_entries(self, info: WadInfo, buffer: bytes) -> List[LumpInfo]:
        size = len(buffer)
        end = info.dir_pos + info.num_lumps * DIRECTORY_ENTRY_SIZE
        if info.num_lumps < 0 or info.dir_pos < 0 or end > size:
            raise WadLoadError(
                code=E_LOAD,
                message="Directory runs past the end of the container",
                context={
                    "num_lumps": info.num_lumps,
                    "dir_pos": info.dir_pos,
                    "size": size,
                },
            )
        entries: List[LumpInfo] = []
        for i in range(info.num_lumps):
            entry = LumpInfo.from_bytes(buffer, info.dir_pos + i * DIRECTORY_ENTRY_SIZE)
            if entry.pos < 0 or entry.size < 0 or entry.pos + entry.size > size:
                raise WadLoadError(
                    code=E_LOAD,
                    message=f"Lump {entry.name_ascii()!r} payload out of range",
                    context={
                        "index": i,
                        "pos": entry.pos,
                        "size": entry.size,
                        "container_size": size,
                    },
                )
            entries.append(entry)
        return entries

    def parse(self, info: WadInfo, buffer: bytes) -> None:
        """Rebuild the lump list from ``buffer`` (validated before any change)."""
        entries = self._read_entries(info, buffer)
        logger = get_logger()
        rep = get_reporter()
        state = ParseState()
        lumps: List[Lump] = []
        pal = Palettes.empty()
        pal.index = self.pal.index

        rep.start_task("parse.directory", "Parse directory", total=len(entries))
        failed = 0
        for metadata in entries:
            name = metadata.name_ascii()
            metadata.set_id(assign_id(name, state))
            kind = classify(name, metadata.size, state)
            data = LumpData(
                bytes(buffer[metadata.pos : metadata.pos + metadata.size]),
                metadata,
                kind,
            )
            lump = decoder_for(data, pal)
            if not lump.try_decode():
                failed += 1
            if kind is LumpKind.PALETTE:
                # Later flats and patches are colored with this palette
                pal = lump
                lump = pal.copy()
            lumps.append(lump)
            rep.advance("parse.directory")
            logger.debug("%s", lump)
        rep.end_task("parse.directory", lumps=len(lumps), failed=failed)

        self.lumps = lumps
        self.pal = pal

    # Queries ------------------------------------------------------------------
    def select(
        self,
        pattern: str | Pattern[str],
        callback: Optional[Callable[[Lump], None]] = None,
    ) -> List[Lump]:
        """Lumps whose name fully matches ``pattern``, in directory order."""
        regex = compile_pattern(pattern)
        selected = [lump for lump in self.lumps if regex.fullmatch(lump.name)]
        if callback is not None:
            for lump in selected:
                callback(lump)
        return selected

    def select_mut(
        self,
        pattern: str | Pattern[str],
        callback: Callable[[LumpData], Optional[LumpData]],
    ) -> int:
        """Hand a snapshot of each match to ``callback``; store what it returns."""
        count = 0
        for lump in self.select(pattern):
            result = callback(lump.snapshot())
            if result is not None:
                lump.replace_snapshot(result)
                count += 1
        return count

    def indices(self, pattern: str | Pattern[str]) -> List[int]:
        regex = compile_pattern(pattern)
        return [i for i, lump in enumerate(self.lumps) if regex.fullmatch(lump.name)]

    def matches(self, pattern: str | Pattern[str]) -> List[str]:
        regex = compile_pattern(pattern)
        return [lump.id for lump in self.lumps if regex.fullmatch(lump.id)]

    def index_of(self, lump_id: str) -> int:
        for i, lump in enumerate(self.lumps):
            if lump.id == lump_id:
                return i
        raise LumpNotFoundError(
            code=E_LUMP_NOT_FOUND,
            message=f"No lump with id {lump_id!r}",
            context={"id": lump_id},
        )

    def lookup(self, lump_id: str) -> Optional[Lump]:
        for lump in self.lumps:
            if lump.id == lump_id:
                return lump
        return None

    def alive_count(self) -> int:
        return sum(1 for lump in self.lumps if lump.metadata.state.is_alive())

    def stats(self) -> Dict[LumpState, int]:
        counts = {state: 0 for state in LumpState}
        for lump in self.lumps:
            counts[lump.metadata.state] += 1
        return counts

    # Mutations ----------------------------------------------------------------
    def tombstone(self, pattern: str | Pattern[str]) -> int:
        """Mark lumps whose id fully matches ``pattern`` as DELETED."""
        regex = compile_pattern(pattern)
        count = 0
        for lump in self.lumps:
            info = lump.metadata
            if info.state is LumpState.DELETED or not regex.fullmatch(lump.id):
                continue
            info.state = LumpState.DELETED
            count += 1
        return count

    def set_palette(self, value: int) -> None:
        """Select palette ``value`` (modulo the known count) for later lumps."""
        self.pal.set_index(value)
        for lump in self.lumps:
            if isinstance(lump, Palettes):
                lump.index = self.pal.index

    def insert(self, add: LumpAdd) -> str:
        """Place a new lump described by ``add``; return its id."""
        raw_name = add.name_bytes()
        name = raw_name.decode("ascii")
        anchor = None
        if add.placement in (Placement.BEFORE, Placement.AFTER):
            if add.anchor is None:
                raise LumpNotFoundError(
                    code=E_LUMP_NOT_FOUND,
                    message=f"Placement {add.placement.name} requires an anchor",
                    context={"name": name},
                )
            anchor = self.index_of(add.anchor)

        pos = max((lump.metadata.pos for lump in self.lumps), default=0) + 1
        metadata = LumpInfo(pos, len(add.buffer), raw_name)
        state = ParseState(used_ids={lump.id for lump in self.lumps})
        metadata.set_id(assign_id(metadata.name_ascii(), state))

        lump = decoder_for(LumpData(bytes(add.buffer), metadata, add.kind), self.pal)
        lump.try_decode()
        if add.placement is Placement.FRONT:
            self.lumps.insert(0, lump)
        elif add.placement is Placement.BACK:
            self.lumps.append(lump)
        elif add.placement is Placement.BEFORE:
            self.lumps.insert(anchor, lump)
        else:
            self.lumps.insert(anchor + 1, lump)
        get_logger().debug("Inserted %s (%s)", lump.id, add.placement.name)
        return lump.id
