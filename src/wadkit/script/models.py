"""Dataclass models for WAD edit scripts."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..container.records import LumpKind, Placement


@dataclass(slots=True)
class RemoveStep:
    pattern: str


@dataclass(slots=True)
class AddStep:
    name: str
    data: bytes = b""
    placement: Placement = Placement.BACK
    anchor: Optional[str] = None
    kind: LumpKind = LumpKind.UNKNOWN


@dataclass(slots=True)
class ReplaceStep:
    regex: str
    data: bytes = b""


Step = Union[RemoveStep, AddStep, ReplaceStep]


@dataclass(slots=True)
class EditScript:
    palette: Optional[int] = None
    steps: List[Step] = field(default_factory=list)


__all__ = ["RemoveStep", "AddStep", "ReplaceStep", "Step", "EditScript"]
