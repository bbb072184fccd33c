#!/usr/bin/env python
"""Interactive per-asset bandwidth explorer for CDN request logs (NDJSON).

Usage examples:
  # Browse a log interactively
  python bandwidth_tui.py requests.ndjson

  # Start on the by-type tab sorted by request count, smallest first
  python bandwidth_tui.py requests.ndjson --view type --sort requests --asc

  # Print the tables once (or JSON) instead of starting the UI
  python bandwidth_tui.py requests.ndjson --print
  python bandwidth_tui.py requests.ndjson --json

Exit codes:
  0 success
  1 log file missing/unreadable, invalid settings, or unexpected failure
  130 interrupted
"""
from __future__ import annotations
import argparse
import json
import logging
import pathlib
import sys
from typing import Optional

from bandwidth_core.config import Settings, SortField, ViewMode, load_settings
from bandwidth_core.context import ExplorerContext, load_context
from bandwidth_core.exceptions import BandwidthError, ConfigError, LogFileError
from bandwidth_core.view_controller import SortState, ViewController, build_rows

logger = logging.getLogger("bandwidth_tui")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        filename=settings.log_file,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Settings file (or environment) first, then command-line overrides."""
    settings = load_settings(pathlib.Path(args.config) if args.config else None)
    return settings.updated(
        base_url=args.base_url,
        sort_field=SortField.from_name(args.sort) if args.sort else None,
        descending=args.descending,
        view_mode=ViewMode.from_name(args.view) if args.view else None,
        log_level=args.log_level.upper() if args.log_level else None,
        log_file=args.log_file,
    )


def context_payload(context: ExplorerContext) -> dict:
    sort = SortState(context.settings.sort_field, context.settings.descending)
    tables = context.tables
    return {
        **context.as_dict(),
        "sort": {"field": sort.field.name.lower(), "descending": sort.descending},
        "by_asset": [row.as_dict() for row in build_rows(tables, ViewMode.ASSET, sort)],
        "by_type": [row.as_dict() for row in build_rows(tables, ViewMode.TYPE, sort)],
        "by_extension": [row.as_dict() for row in tables.extension_rows()],
    }


def cmd_explore(args: argparse.Namespace) -> int:
    try:
        settings = resolve_settings(args)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    configure_logging(settings)
    logger.debug(f"Effective settings: {settings}")

    try:
        context = load_context(pathlib.Path(args.log), settings)
    except LogFileError as e:
        print(f"ERROR: cannot read log {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(context_payload(context), indent=2, default=str))
        return 0

    # rich is only needed for drawing
    from bandwidth_core import tui

    if args.print:
        tui.print_tables(context)
        return 0

    tui.run(ViewController(context))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Explore per-asset bandwidth in a CDN request log (NDJSON)")
    p.add_argument("log", help="Path to the NDJSON request log")
    p.add_argument("--config", help="YAML settings file (default: $BANDWIDTH_TUI_CONFIG if set)")
    p.add_argument("--base-url", help="Base URL used to open path-only log URLs (default https://cdn.sanity.io)")
    p.add_argument("--sort", choices=SortField.all_values(), help="Initial sort column")
    direction = p.add_mutually_exclusive_group()
    direction.add_argument("--asc", dest="descending", action="store_false", default=None, help="Sort ascending")
    direction.add_argument("--desc", dest="descending", action="store_true", help="Sort descending")
    p.add_argument("--view", choices=ViewMode.all_values(), help="Initial tab")
    p.add_argument("--print", action="store_true", help="Print the tables once instead of starting the UI")
    p.add_argument("--json", action="store_true", help="Print machine-readable JSON output")
    p.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    p.add_argument("--log-file", help="Write logs to this file instead of stderr")
    p.set_defaults(func=cmd_explore, descending=None)
    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    except BandwidthError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except Exception as e:  # pragma: no cover
        logger.exception("Unexpected failure")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
