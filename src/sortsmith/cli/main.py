# main.py
# SPDX-License-Identifier: MIT

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Optional, Sequence

from ..core.compare import Direction, NilPlacement
from ..core.config import SortConfig, StepSpec, load_config_from_path
from ..core.log import configure_logging, get_logger
from ..core.records import RECORD_FORMATS, read_records, write_records

log = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level sortsmith CLI argument parser.

    Returns:
        argparse.ArgumentParser: Parser with ``sort`` and ``show-config``
        subcommands.
    """
    parser = argparse.ArgumentParser(prog="sortsmith", description="Sortsmith CLI")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g., DEBUG, INFO, WARNING). Overrides the config file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sort_p = subparsers.add_parser("sort", help="Sort the records of a JSON/JSONL file.")
    sort_p.add_argument("input", help="Input .json/.jsonl(.gz) file, or - for stdin.")
    sort_p.add_argument("-o", "--output", help="Output path (defaults to stdout).")
    sort_p.add_argument("-c", "--config", help="Pipeline config file (TOML or JSON).")
    sort_p.add_argument(
        "-k",
        "--key",
        help="Dotted path to sort by (e.g. user.name or tags.0).",
    )
    sort_p.add_argument("--call", dest="call_name", help="Method/attribute to call on each record.")
    sort_p.add_argument(
        "--indifferent",
        action="store_true",
        help="Match keys regardless of string/bytes representation.",
    )
    fold = sort_p.add_mutually_exclusive_group()
    fold.add_argument("--downcase", "-i", action="store_true", help="Case-insensitive (lowercase) compare.")
    fold.add_argument("--upcase", action="store_true", help="Uppercase values before comparing.")
    sort_p.add_argument("--desc", action="store_true", help="Sort in descending order.")
    nils = sort_p.add_mutually_exclusive_group()
    nils.add_argument("--nils-first", action="store_true", help="Place missing values first.")
    nils.add_argument("--nils-last", action="store_true", help="Place missing values last (default).")
    sort_p.add_argument("--format", choices=RECORD_FORMATS, help="Input format override.")
    sort_p.add_argument("--output-format", choices=RECORD_FORMATS, help="Output format override.")

    show_p = subparsers.add_parser("show-config", help="Validate a config file and print it as JSON.")
    show_p.add_argument("-c", "--config", required=True, help="Path to config file (TOML or JSON).")

    return parser


def _split_key(key: str) -> list[Any]:
    """Split a dotted key into path segments; all-digit segments become indices."""
    segments: list[Any] = []
    for part in key.split("."):
        if not part:
            raise ValueError(f"Empty segment in key {key!r}")
        segments.append(int(part) if part.isdigit() else part)
    return segments


def _config_from_args(args: argparse.Namespace) -> SortConfig:
    """Layer CLI flags over an optional config file.

    Extraction and case flags append steps after the config's own steps;
    ordering flags override the config's direction and nil placement.
    """
    cfg = load_config_from_path(args.config) if args.config else SortConfig()
    steps = list(cfg.steps)
    if args.key:
        steps.append(
            StepSpec(kind="dig", options={"path": _split_key(args.key), "indifferent": args.indifferent})
        )
    elif args.indifferent:
        raise ValueError("--indifferent needs --key")
    if args.call_name:
        steps.append(StepSpec(kind="call", options={"name": args.call_name}))
    if args.downcase:
        steps.append(StepSpec(kind="downcase"))
    if args.upcase:
        steps.append(StepSpec(kind="upcase"))
    cfg.steps = tuple(steps)
    if args.desc:
        cfg.direction = Direction.DESC
    if args.nils_first:
        cfg.nils = NilPlacement.FIRST
    elif args.nils_last:
        cfg.nils = NilPlacement.LAST
    cfg.validate()
    return cfg


def _cmd_sort(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    if args.config and args.log_level is None:
        cfg.logging.apply()
    records = read_records(args.input, fmt=args.format)
    ordered = cfg.build_sorter(records).sort()
    written = write_records(ordered, args.output, fmt=args.output_format)
    log.info("Sorted %d record(s) from %s", written, args.input)
    return 0


def _cmd_show_config(args: argparse.Namespace) -> int:
    cfg = load_config_from_path(args.config)
    print(json.dumps(cfg.to_dict(), indent=2))
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch a parsed CLI command to its handler.

    Returns:
        int: Process exit code, where 0 indicates success.
    """
    configure_logging(level=args.log_level or "WARNING")
    cmd = args.command

    if cmd == "sort":
        return _cmd_sort(args)

    if cmd == "show-config":
        return _cmd_show_config(args)

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the sortsmith command-line interface.

    Args:
        argv (Sequence[str] | None): Argument strings to parse instead of
            ``sys.argv[1:]``. Primarily useful for tests.

    Returns:
        int: Process exit code, where 0 indicates success and non-zero
        values indicate failure.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return _dispatch(args)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
