"""Command line interface for blorbgen.

``blorbgen`` exposes subcommands (``build``, ``inspect``, ``validate``). The
``bresc``, ``bres`` and ``blc`` entry points accept the classic form
``bresc [options] control-file [output-file]`` and pick their defaults from
the name they were invoked under (see :mod:`blorbgen.config`). Any other
name is rejected.
"""

from __future__ import annotations

import argparse
import json
import re
import sys
from pathlib import Path

from . import __version__
from .api import BuildOptions, build_blorb, inspect_blorb, validate_blorb
from .config import Personality, personality_for
from .logging import configure_logging, step
from .packing.errors import BlorbError, ConfigurationError
from .reporting import (
    JsonLinesReporter,
    PlainReporter,
    RichReporter,
    SilentReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)

_SUBCOMMANDS = ("build", "inspect", "validate")
_GLOBAL_FLAGS = ("--verbose", "--version", "-h", "--help")
_GLOBAL_OPTIONS_WITH_VALUE = ("-r", "--reporter")


def _build_options(args: argparse.Namespace, personality: Personality) -> BuildOptions:
    index_only = personality.index_only or args.bli_only
    emit = (personality.emit_declarations or args.bli_only) and not args.no_bli
    return BuildOptions(
        control_file=args.control,
        output_path=args.output,
        index_only=index_only,
        emit_declarations=emit or index_only,
        short_extension=personality.short_extension or args.short_ext,
        manifest_path=args.emit_manifest,
        program=personality.name,
    )


def _build_cmd(args: argparse.Namespace) -> int:
    personality = personality_for(args.program or args.prog)
    opts = _build_options(args, personality)
    rep = get_reporter()
    rep.verbose(
        "Create .bli file: "
        + ("Yes" if opts.emit_declarations else "No")
        + "\tGenerate blorb: "
        + ("No" if opts.index_only else "Yes")
        + "\tShort ext.: "
        + ("Yes" if opts.short_extension else "No"),
        level=1,
    )
    result = build_blorb(opts)
    final = result.output_file or result.declarations_file
    rep.status(f"End ('{final}').")
    return 0


def _inspect_cmd(args: argparse.Namespace) -> int:
    step(f"inspecting {args.blorb.name}")
    info = inspect_blorb(args.blorb)
    rep = get_reporter()
    rep.flush()
    if args.json:
        print(json.dumps(info, indent=2, sort_keys=True))
        return 0
    rep.section(f"{args.blorb.name}")
    header = info["header"]
    rep.status(
        f"Header: form={header['form']} format={header['format']} size={header['size']} file_size={info['file_size']}"
    )
    for c in info["chunks"]:
        rep.status(f"Chunk '{c['type']}' @{c['offset']} length={c['length']}")
    for e in info["index"]:
        rep.status(
            f"Index '{e['usage']}' #{e['resource_number']} -> {e['offset']}"
        )
    return 0


def _validate_cmd(args: argparse.Namespace) -> int:
    step(f"validating {args.blorb.name}")
    issues = validate_blorb(args.blorb)
    rep = get_reporter()
    for issue in issues:
        rep.error(issue)
    rep.status(f"Validation summary: issues={len(issues)}")
    return 1 if issues else 0


def build_parser(prog: str = "blorbgen") -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog, description="Blorb resource packager"
    )
    p.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
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
    p.set_defaults(prog=prog)
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="Build a Blorb from a resource control file")
    b.add_argument("control", type=Path, help="Control file (.res assumed)")
    b.add_argument("output", type=Path, nargs="?", help="Output Blorb file")
    only = b.add_mutually_exclusive_group()
    only.add_argument(
        "--no-bli",
        "--nobli",
        dest="no_bli",
        action="store_true",
        help="Do not generate the .bli declarations file",
    )
    only.add_argument(
        "--bli-only",
        "--blionly",
        dest="bli_only",
        action="store_true",
        help="Only generate the .bli file, no Blorb",
    )
    b.add_argument(
        "--short-ext",
        "--shortext",
        dest="short_ext",
        action="store_true",
        help="Always use the .blb extension for the Blorb",
    )
    b.add_argument(
        "--emit-manifest",
        dest="emit_manifest",
        type=Path,
        help="Optional path to write manifest JSON (opt-in)",
    )
    b.add_argument(
        "--program",
        help="Personality to build with (bresc, bres, blc); defaults to the invoked name",
    )
    b.set_defaults(func=_build_cmd)

    i = sub.add_parser("inspect", help="Inspect a Blorb file")
    i.add_argument("blorb", type=Path)
    i.add_argument("--json", action="store_true", help="Emit JSON description")
    i.set_defaults(func=_inspect_cmd)

    v = sub.add_parser("validate", help="Validate a Blorb file")
    v.add_argument("blorb", type=Path)
    v.set_defaults(func=_validate_cmd)

    return p


def _is_global_option(arg: str) -> bool:
    if arg in _GLOBAL_FLAGS or re.fullmatch(r"-v+", arg):
        return True
    return arg.startswith("--reporter=") or (arg.startswith("-r") and len(arg) > 2)


def _implicit_build(argv: list[str]) -> list[str]:
    """Insert ``build`` right after the leading global options.

    Everything from the first non-global argument on belongs to ``build``,
    so build options taking a value (``--emit-manifest PATH``) keep working.
    Global options must therefore come first in the classic form.
    """
    pos = 0
    while pos < len(argv):
        arg = argv[pos]
        if arg in _GLOBAL_OPTIONS_WITH_VALUE:
            pos += 2
        elif _is_global_option(arg):
            pos += 1
        else:
            break
    if pos < len(argv) and argv[pos] in _SUBCOMMANDS:
        return argv
    return [*argv[:pos], "build", *argv[pos:]]


def _select_reporter(requested: str) -> None:
    if requested == "json":
        set_reporter(JsonLinesReporter())
    elif requested == "silent":
        set_reporter(SilentReporter())
    elif requested == "rich" and sys.stderr.isatty():
        set_reporter(RichReporter())
    else:
        # Plain, or rich without a TTY
        set_reporter(PlainReporter())


def main(argv: list[str] | None = None, prog: str | None = None) -> int:
    argv = list(argv if argv is not None else sys.argv[1:])
    try:
        prog = personality_for(prog or sys.argv[0]).name
    except ConfigurationError as exc:
        get_reporter().error(f"{exc.message}: '{exc.context['program']}'")
        return 1
    if prog != "blorbgen":
        argv = _implicit_build(argv)
    parser = build_parser(prog)
    args = parser.parse_args(argv)
    _select_reporter(args.reporter)
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except BlorbError as exc:
        rep = get_reporter()
        rep.flush()
        rep.error(exc.message)
        return 1


def bresc_main() -> int:
    return main(prog="bresc")


def bres_main() -> int:
    return main(prog="bres")


def blc_main() -> int:
    return main(prog="blc")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(prog="blorbgen"))
