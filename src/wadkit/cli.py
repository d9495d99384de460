"""Command line interface for wadkit."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .api import (
    EditOptions,
    RunOptions,
    apply_script,
    inspect_wad,
    run_operation,
)
from .container.inspector import validate_wad
from .errors import InvalidOperationError, WadError
from .logging import configure_logging, step
from .reporting import (
    set_reporter,
    get_reporter,
    PlainReporter,
    JsonLinesReporter,
    SilentReporter,
    RichReporter,
    set_verbosity,
)


def _run_cmd(args: argparse.Namespace) -> int:
    opts = RunOptions(
        path=args.path,
        operation=args.operation,
        regex=args.regex,
        directory=args.dir,
        palette=args.palette,
        output=args.output,
    )
    result = run_operation(opts)
    rep = get_reporter()
    rep.flush()
    for line in result.lines:
        print(line)
    return 0


def _inspect_cmd(args: argparse.Namespace) -> int:
    step(f"inspecting {args.path.name}")
    info = inspect_wad(args.path)
    issues = validate_wad(info)
    rep = get_reporter()
    rep.flush()
    if args.json:
        print(json.dumps({**info, "issues": issues}, indent=2, sort_keys=True))
    else:
        header = info.get("header") or {}
        print(
            f"{header.get('kind', '?')} lumps={header.get('num_lumps', '?')} "
            f"dir_pos={header.get('dir_pos', '?')} size={info['file_size']}"
        )
        for i, e in enumerate(info.get("directory_entries", [])):
            print(f"{i:5d} {e['name']:<8} pos={e['pos']} size={e['size']}")
    for issue in issues:
        rep.warning(issue)
    rep.status(
        "Inspect summary: "
        + f"file={args.path.name} entries={len(info.get('directory_entries', []))} "
        + f"issues={len(issues)}"
    )
    return 1 if issues else 0


def _apply_cmd(args: argparse.Namespace) -> int:
    apply_script(
        EditOptions(
            input_path=args.path,
            script_path=args.script,
            output_path=args.output,
        )
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wadkit", description="DOOM WAD inspection and rebuild tool"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("run", help="Dump, export or remove lumps")
    r.add_argument("path", type=Path)
    r.add_argument(
        "--regex", help="Match lump names (full match), everything by default"
    )
    r.add_argument(
        "--operation",
        default="dump",
        help="dump (default), save, save_as / save-as, remove",
    )
    r.add_argument("--dir", type=Path, help="Output directory")
    r.add_argument(
        "--palette", type=int, default=0, help="Palette index, 0 by default"
    )
    r.add_argument(
        "--output",
        type=Path,
        help="Rebuilt WAD path for remove (default <dir>/<stem>.edited.wad)",
    )
    r.set_defaults(func=_run_cmd)

    i = sub.add_parser("inspect", help="Inspect a WAD header and directory")
    i.add_argument("path", type=Path)
    i.add_argument("--json", action="store_true", help="Emit JSON")
    i.set_defaults(func=_inspect_cmd)

    a = sub.add_parser("apply", help="Apply an edit script and rebuild")
    a.add_argument("path", type=Path)
    a.add_argument("script", type=Path)
    a.add_argument("output", type=Path)
    a.set_defaults(func=_apply_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    requested = args.reporter
    if requested == "json":
        set_reporter(JsonLinesReporter())
    elif requested == "silent":
        set_reporter(SilentReporter())
    elif requested == "rich":
        if sys.stderr.isatty():
            set_reporter(RichReporter())
        else:
            # Fallback quietly to plain if no TTY
            set_reporter(PlainReporter())
    else:  # plain
        set_reporter(PlainReporter())
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except InvalidOperationError as e:
        get_reporter().error(e.message, code=e.code)
        return 2
    except WadError as e:
        get_reporter().error(e.message, code=e.code, context=e.context or {})
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
