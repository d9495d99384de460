"""Edit-script loading utilities (JSON/YAML)."""

from __future__ import annotations
from pathlib import Path
from typing import Any
import json

import yaml

from ..container.records import LumpAdd, LumpKind, Placement
from ..errors import InvalidLumpError, WadError, script_error
from ..utils.io import read_payload
from .models import AddStep, EditScript, RemoveStep, ReplaceStep, Step

STEP_TYPES = ("remove", "add", "replace")


def load_script(path: str | Path) -> EditScript:
    p = Path(path)
    if not p.is_file():
        raise script_error(f"Script not found: {p}", {"path": str(p)})
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise script_error(f"Unable to parse {p.name}: {e}", {"path": str(p)}) from e
    if not isinstance(data, dict):
        raise script_error("Root of an edit script must be an object")
    return parse_script_dict(data, p.parent)


def parse_script_dict(data: dict[str, Any], base_dir: Path) -> EditScript:
    palette = data.get("palette")
    if palette is not None and (isinstance(palette, bool) or not isinstance(palette, int)):
        raise script_error("palette must be an integer", {"palette": palette})
    steps_raw = data.get("steps", [])
    if not isinstance(steps_raw, list):
        raise script_error("steps must be a list")
    script = EditScript(palette=palette)
    for index, raw in enumerate(steps_raw):
        try:
            script.steps.append(_parse_step(raw, base_dir))
        except WadError as e:
            context = dict(e.context or {})
            context["step"] = index
            raise script_error(f"step {index}: {e.message}", context) from e
    return script


def _parse_step(raw: Any, base_dir: Path) -> Step:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise script_error(f"a step is a single-key mapping of {STEP_TYPES}")
    (op, body), = raw.items()
    if op == "remove":
        if not isinstance(body, str):
            raise script_error("remove expects a regex string")
        return RemoveStep(pattern=body)
    if not isinstance(body, dict):
        raise script_error(f"{op} expects a mapping")
    if op == "add":
        name = body.get("name")
        if not isinstance(name, str) or not name:
            raise script_error("add requires a name")
        try:
            LumpAdd(name=name).name_bytes()
        except InvalidLumpError as e:
            raise script_error(e.message, {"name": name}) from e
        try:
            placement = Placement.parse(str(body.get("placement", "back")))
            kind = LumpKind[str(body.get("kind", "unknown")).strip().upper()]
        except KeyError as e:
            raise script_error(f"unknown placement or kind {e}") from e
        anchor = body.get("anchor")
        if placement in (Placement.BEFORE, Placement.AFTER) and not anchor:
            raise script_error(f"placement {placement.name.lower()} requires an anchor")
        return AddStep(
            name=name,
            data=read_payload(body, base_dir),
            placement=placement,
            anchor=anchor,
            kind=kind,
        )
    if op == "replace":
        regex = body.get("regex")
        if not isinstance(regex, str):
            raise script_error("replace requires a regex")
        return ReplaceStep(regex=regex, data=read_payload(body, base_dir))
    raise script_error(f"unknown step type {op!r}", {"expected": list(STEP_TYPES)})


__all__ = ["load_script", "parse_script_dict", "STEP_TYPES"]
