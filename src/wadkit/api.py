"""High-level API for wadkit.

Thin orchestration over :class:`wadkit.wad.Wad` used by the CLI; every
function reports through the active reporter and raises :class:`WadError`
subclasses on failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from .container.inspector import (
    inspect_wad as _inspect_wad_impl,
    validate_wad as _validate_wad_impl,
)
from .container.records import LumpAdd
from .errors import E_INVALID_OPERATION, InvalidOperationError
from .logging import get_logger
from .reporting import get_reporter, task
from .script.loader import load_script
from .script.models import AddStep, EditScript, RemoveStep, ReplaceStep
from .utils.paths import edited_output_path
from .wad import Wad

__all__ = [
    "Operation",
    "RunOptions",
    "RunResult",
    "EditOptions",
    "EditResult",
    "load_wad",
    "run_operation",
    "apply_script",
    "apply_edit_script",
    "inspect_wad",
    "validate_wad",
]


class Operation(Enum):
    DUMP = "dump"
    SAVE = "save"
    SAVE_AS = "save_as"
    REMOVE = "remove"

    @classmethod
    def parse(cls, value: str) -> "Operation":
        normalized = value.strip().lower().replace("-", "_")
        for op in cls:
            if op.value == normalized:
                return op
        raise InvalidOperationError(
            code=E_INVALID_OPERATION,
            message=f"Unknown operation {value!r}",
            context={"expected": [op.value for op in cls]},
        )


@dataclass(slots=True)
class RunOptions:
    path: Path
    operation: str = "dump"
    regex: Optional[str] = None
    directory: Optional[Path] = None
    palette: int = 0
    output: Optional[Path] = None


@dataclass(slots=True)
class RunResult:
    operation: Operation
    selected: int = 0
    lines: List[str] = field(default_factory=list)
    files_written: int = 0
    removed: int = 0
    output_file: Optional[Path] = None
    bytes_written: int = 0


@dataclass(slots=True)
class EditOptions:
    input_path: Path
    script_path: Path
    output_path: Path


@dataclass(slots=True)
class EditResult:
    output_file: Path
    bytes_written: int
    removed: int = 0
    added: int = 0
    replaced: int = 0


def load_wad(path: str | Path, palette: int = 0) -> Wad:
    wad = Wad()
    wad.set_palette(palette)
    with task("load.wad", f"Load {Path(path).name}"):
        wad.load_from_file(path)
    failed = sum(1 for lump in wad.lumps if lump.error is not None)
    get_reporter().status(
        "Load summary: "
        + f"file={Path(path).name} kind={wad.info.kind.name} lumps={len(wad.dir)} "
        + f"decode_errors={failed}"
    )
    return wad


def run_operation(options: RunOptions) -> RunResult:
    """The ``run`` verb: dump, export or remove the lumps matching a regex."""
    op = Operation.parse(options.operation)
    wad = load_wad(options.path, options.palette)
    if options.regex is not None:
        wad.select(options.regex)
    rep = get_reporter()
    result = RunResult(operation=op, selected=len(wad.selected()))
    if op is Operation.DUMP:
        result.lines = wad.dump()
    elif op in (Operation.SAVE, Operation.SAVE_AS):
        out_dir = options.directory or Path.cwd()
        if op is Operation.SAVE:
            result.files_written = wad.save_lumps(out_dir)
        else:
            result.files_written = wad.save_lumps_raw(out_dir)
        rep.status(
            "Export summary: "
            + f"operation={op.value} selected={result.selected} "
            + f"files={result.files_written} dir={out_dir}"
        )
    else:
        result.removed = wad.remove()
        output = options.output or edited_output_path(
            Path(options.path), options.directory
        )
        output.parent.mkdir(parents=True, exist_ok=True)
        result.bytes_written = wad.save(output)
        result.output_file = output
        rep.status(
            "Rebuild summary: "
            + f"file={output.name} bytes={result.bytes_written} "
            + f"removed={result.removed} lumps={wad.dir.alive_count()}"
        )
    return result


def apply_edit_script(wad: Wad, script: EditScript) -> EditResult:
    """Apply ``script`` to a loaded ``wad``; the result has no output yet."""
    logger = get_logger()
    result = EditResult(output_file=Path(), bytes_written=0)
    if script.palette is not None:
        wad.set_palette(script.palette)
        wad.reload()
    for step in script.steps:
        if isinstance(step, RemoveStep):
            count = wad.remove_by_name(step.pattern)
            result.removed += count
            logger.info("Removed %d lump(s) matching %s", count, step.pattern)
        elif isinstance(step, AddStep):
            lump_id = wad.add_lump_raw(
                LumpAdd(
                    name=step.name,
                    buffer=step.data,
                    placement=step.placement,
                    anchor=step.anchor,
                    kind=step.kind,
                )
            )
            result.added += 1
            logger.info("Added %s (%d bytes)", lump_id, len(step.data))
        elif isinstance(step, ReplaceStep):
            wad.select(step.regex)
            count = wad.update_lumps_raw(step.data)
            result.replaced += count
            logger.info("Replaced %d lump(s) matching %s", count, step.regex)
    return result


def apply_script(options: EditOptions) -> EditResult:
    script = load_script(options.script_path)
    wad = load_wad(options.input_path)
    result = apply_edit_script(wad, script)
    options.output_path.parent.mkdir(parents=True, exist_ok=True)
    result.bytes_written = wad.save(options.output_path)
    result.output_file = options.output_path
    get_reporter().status(
        "Edit summary: "
        + f"file={options.output_path.name} bytes={result.bytes_written} "
        + f"removed={result.removed} added={result.added} replaced={result.replaced}"
    )
    return result


def inspect_wad(path: str | Path) -> dict[str, Any]:
    return _inspect_wad_impl(path)


def validate_wad(path: str | Path) -> list[str]:
    return _validate_wad_impl(_inspect_wad_impl(path))
