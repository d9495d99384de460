"""Rebuild planning: compute the compacted layout of a container.

The plan is the single source of truth for offsets; the writer emits bytes
and checks every position it reaches against it.

Layout: 12-byte header, directory (one 16-byte entry per surviving lump),
then payloads packed back to back in directory order. Lumps that shared an
offset in the source container and still carry identical bytes keep sharing
one payload slot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..lumps import Lump
from .constants import DIRECTORY_ENTRY_SIZE, HEADER_SIZE
from .directory import LumpsDirectory
from .records import LumpInfo, WadInfo, WadKind

__all__ = [
    "PlannedEntry",
    "RebuildPlan",
    "compute_rebuild_plan",
    "to_plan_dict",
]


@dataclass(slots=True)
class PlannedEntry:
    lump_id: str
    info: LumpInfo
    payload: bytes
    offset: int  # payload offset in the rebuilt container
    entry_pos: int  # pos value written in the directory entry
    owner: bool  # True when this entry emits its payload
    virtual: bool = False


@dataclass(slots=True)
class RebuildPlan:
    kind: WadKind
    dir_pos: int
    entries: List[PlannedEntry]
    payload_offset: int
    payload_size: int
    file_size: int
    aliased: int = 0
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def num_lumps(self) -> int:
        return len(self.entries)

    def header(self) -> WadInfo:
        return WadInfo(self.kind, self.num_lumps, self.dir_pos)


def to_plan_dict(plan: RebuildPlan) -> Dict[str, Any]:
    return {
        "kind": plan.kind.name,
        "dir_pos": plan.dir_pos,
        "num_lumps": plan.num_lumps,
        "payload_offset": plan.payload_offset,
        "payload_size": plan.payload_size,
        "file_size": plan.file_size,
        "aliased": plan.aliased,
        "skipped": plan.skipped,
        "entries": [
            {
                "id": e.lump_id,
                "name": e.info.name_ascii(),
                "size": e.info.size,
                "offset": e.offset,
                "pos": e.entry_pos,
                "owner": e.owner,
                "virtual": e.virtual,
            }
            for e in plan.entries
        ],
        "warnings": list(plan.warnings),
    }


def compute_rebuild_plan(info: WadInfo, directory: LumpsDirectory) -> RebuildPlan:
    alive: List[Lump] = [
        lump for lump in directory.lumps if lump.metadata.state.is_alive()
    ]
    dir_pos = HEADER_SIZE
    payload_offset = dir_pos + DIRECTORY_ENTRY_SIZE * len(alive)
    cursor = payload_offset
    # (source pos, payload) -> assigned offset
    slots: Dict[Tuple[int, bytes], int] = {}
    entries: List[PlannedEntry] = []
    aliased = 0
    warnings: List[str] = []

    for lump in alive:
        meta = lump.metadata
        payload = bytes(lump.data.buffer)
        if len(payload) != meta.size:
            warnings.append(
                f"{lump.id}: directory size {meta.size} != payload {len(payload)}"
            )
        owner = True
        if not payload:
            offset = cursor
            owner = False
        else:
            key = (meta.pos, payload)
            if key in slots:
                offset = slots[key]
                owner = False
                aliased += 1
            else:
                offset = cursor
                slots[key] = offset
                cursor += len(payload)
        virtual = meta.is_virtual()
        entries.append(
            PlannedEntry(
                lump_id=lump.id,
                info=meta,
                payload=payload,
                offset=offset,
                entry_pos=0 if virtual else offset,
                owner=owner,
                virtual=virtual,
            )
        )

    kind = info.kind if info.kind is not WadKind.UNKNOWN else WadKind.PWAD
    return RebuildPlan(
        kind=kind,
        dir_pos=dir_pos,
        entries=entries,
        payload_offset=payload_offset,
        payload_size=cursor - payload_offset,
        file_size=cursor,
        aliased=aliased,
        skipped=len(directory.lumps) - len(alive),
        warnings=warnings,
    )
