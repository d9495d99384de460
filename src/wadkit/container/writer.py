"""Binary writer emitting a rebuilt container from a :class:`RebuildPlan`.

The writer performs no layout math of its own. Every directory entry and
payload lands at the position the planner computed; any divergence raises
:class:`RebuildError` and no buffer is returned.
"""

from __future__ import annotations

import io
import struct

from ..errors import rebuild_error
from ..logging import get_logger
from ..reporting import TaskStatus, get_reporter
from .constants import DIRECTORY_ENTRY_SIZE, ENTRY_STRUCT, HEADER_SIZE
from .planner import RebuildPlan

__all__ = ["write_wad"]


def _expect(f: io.BytesIO, target: int, label: str) -> None:
    pos = f.tell()
    if pos != target:
        raise rebuild_error(
            f"Writer position {pos} diverged from planned {label} offset {target}",
            {"label": label, "position": pos, "planned": target},
        )


def _write_directory(f: io.BytesIO, plan: RebuildPlan) -> None:
    rep = get_reporter()
    rep.start_task("write.directory", "Directory", total=plan.num_lumps)
    try:
        _expect(f, plan.dir_pos, "directory")
        for entry in plan.entries:
            f.write(
                struct.pack(
                    ENTRY_STRUCT,
                    entry.entry_pos,
                    len(entry.payload),
                    entry.info.name,
                )
            )
            rep.advance("write.directory")
        _expect(f, plan.payload_offset, "payload")
    except Exception:
        rep.end_task("write.directory", TaskStatus.FAILED)
        raise
    rep.end_task(
        "write.directory",
        entries=plan.num_lumps,
        bytes=plan.num_lumps * DIRECTORY_ENTRY_SIZE,
    )


def _write_payloads(f: io.BytesIO, plan: RebuildPlan) -> int:
    rep = get_reporter()
    owners = [e for e in plan.entries if e.owner]
    rep.start_task("write.payloads", "Payloads", total=len(owners))
    try:
        for entry in owners:
            _expect(f, entry.offset, f"lump {entry.lump_id}")
            f.write(entry.payload)
            rep.advance("write.payloads")
        written = f.tell() - plan.payload_offset
        if written != plan.payload_size:
            raise rebuild_error(
                f"Payload size mismatch: plan={plan.payload_size} written={written}",
                {"planned": plan.payload_size, "written": written},
            )
    except Exception:
        rep.end_task("write.payloads", TaskStatus.FAILED)
        raise
    rep.end_task(
        "write.payloads",
        lumps=len(owners),
        bytes=written,
        planned=plan.payload_size,
    )
    return written


def write_wad(plan: RebuildPlan) -> bytes:
    logger = get_logger()
    f = io.BytesIO()
    f.write(plan.header().to_bytes())
    _expect(f, HEADER_SIZE, "header end")
    _write_directory(f, plan)
    written = _write_payloads(f, plan)
    data = f.getvalue()
    if len(data) != plan.file_size:
        raise rebuild_error(
            f"Container size mismatch vs plan: plan={plan.file_size} actual={len(data)}",
            {"planned": plan.file_size, "actual": len(data)},
        )
    for warning in plan.warnings:
        logger.warning(warning)
    logger.info(
        "Rebuilt WAD size=%d bytes lumps=%d deleted=%d aliased=%d (payload %d bytes)",
        len(data),
        plan.num_lumps,
        plan.skipped,
        plan.aliased,
        written,
    )
    return data
