"""CLI entrypoint for ldocgen."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator, format_report


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ldocgen",
        description="Convert LuaLS annotations into LDoc annotations over body-less dummy code.",
    )
    parser.add_argument(
        "-p",
        "--path",
        default=".",
        help="Lua file or directory to convert (defaults to current directory).",
    )
    parser.add_argument(
        "-o",
        "--out-dir",
        default=".",
        help="Directory that receives the generated tree (defaults to current directory).",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a .ldocgen.yml file (defaults to the one in --path, if any).",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of files converted in parallel.",
    )
    parser.add_argument(
        "--nodoc-drops-declaration",
        action="store_true",
        default=None,
        help="Omit declarations tagged @nodoc entirely instead of only their comments.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Only log warnings and failures.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write a DEBUG-level log to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for ldocgen."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
    )

    input_path = Path(args.path).expanduser()
    if not input_path.exists():
        parser.exit(1, f"Input path not found: {input_path}\n")

    config_source = Path(args.config) if args.config else (input_path if input_path.is_dir() else input_path.parent)
    try:
        config = load_config(config_source)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    if args.nodoc_drops_declaration is not None:
        config = replace(config, nodoc_drops_declaration=True)

    orchestrator = Orchestrator(workers=args.workers)
    try:
        report = orchestrator.run(input_path, args.out_dir, config=config)
    except OSError as exc:
        parser.exit(1, f"ldocgen failed: {exc}\nRun with --verbose for more details.\n")

    root = input_path.resolve() if input_path.is_dir() else input_path.resolve().parent
    for line in format_report(report, root):
        print(line)

    if report.exit_code:
        parser.exit(report.exit_code, f"{len(report.failed)} file(s) failed\n")


if __name__ == "__main__":
    main(sys.argv[1:])
