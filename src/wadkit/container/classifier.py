"""Namespace classification of directory entries.

Zero-length marker lumps (``F_START`` / ``F_END``, ``S_START`` / ``S_END`` and
numbered variants) open and close implicit namespaces. A lump inside a flat
namespace is a FLAT, inside a sprite/patch namespace a PATCH. A few names are
classified regardless of the namespace they appear in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from ..logging import get_logger
from .constants import (
    END_MARKERS,
    FLAT_START_MARKERS,
    LUMP_ID_SIZE,
    MUSIC_PREFIX,
    PALETTE_LUMP,
    PATCH_START_MARKERS,
    RE_F_END,
    RE_F_START,
    RE_S_END,
    RE_S_START,
    TITLE_LUMP,
)
from .records import LumpKind

__all__ = ["ParseState", "classify", "assign_id", "is_marker"]


@dataclass(slots=True)
class ParseState:
    """Marker stack and duplicate-name bookkeeping for a single parse."""

    markers: List[LumpKind] = field(default_factory=list)
    counters: Dict[str, int] = field(default_factory=dict)
    used_ids: Set[str] = field(default_factory=set)

    def push(self, kind: LumpKind) -> None:
        self.markers.append(kind)

    def pop(self, name: str) -> None:
        if not self.markers:
            get_logger().debug("Unbalanced namespace end marker %s", name)
            return
        self.markers.pop()

    def top(self) -> LumpKind | None:
        return self.markers[-1] if self.markers else None


def _marker_action(name: str) -> LumpKind | None | bool:
    """FLAT / PATCH for a start marker, True for an end marker, else None."""
    if name in FLAT_START_MARKERS or RE_F_START.fullmatch(name):
        return LumpKind.FLAT
    if name in PATCH_START_MARKERS or RE_S_START.fullmatch(name):
        return LumpKind.PATCH
    if name in END_MARKERS or RE_F_END.fullmatch(name) or RE_S_END.fullmatch(name):
        return True
    return None


def is_marker(name: str) -> bool:
    return _marker_action(name) is not None


def classify(name: str, size: int, state: ParseState) -> LumpKind:
    """Return the kind of lump ``name``; updates the marker stack of ``state``."""
    if name == PALETTE_LUMP:
        return LumpKind.PALETTE
    action = _marker_action(name)
    if action is True:
        state.pop(name)
        return LumpKind.UNKNOWN
    if action is not None:
        state.push(action)
        return LumpKind.UNKNOWN
    if name == TITLE_LUMP:
        return LumpKind.PATCH
    if name.startswith(MUSIC_PREFIX):
        return LumpKind.SOUND
    top = state.top()
    if size > 0 and top is not None:
        return top
    return LumpKind.UNKNOWN


def _truncate(value: str) -> str:
    return value.encode("ascii")[:LUMP_ID_SIZE].decode("ascii")


def assign_id(name: str, state: ParseState) -> str:
    """Unique id for ``name``: the name itself, then ``name1``, ``name2``..."""
    count = state.counters.get(name)
    if count is None and name not in state.used_ids:
        state.counters[name] = 0
        state.used_ids.add(name)
        return name
    count = count or 0
    while True:
        count += 1
        candidate = _truncate(f"{name}{count}")
        if candidate not in state.used_ids:
            break
    state.counters[name] = count
    state.used_ids.add(candidate)
    return candidate
