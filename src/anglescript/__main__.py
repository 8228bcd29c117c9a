#!/usr/bin/env python3
"""
CLI for the anglescript compiler and runner.

Usage:
    python -m anglescript check FILE
    python -m anglescript run FILE
    python -m anglescript vars FILE

FILE may be '-' to read the program from standard input.

Examples:
    # Check syntax and references without running
    python -m anglescript check examples/hello.as

    # Build and run, printing every notification
    python -m anglescript run examples/hello.as

    # Run, then list every variable with its final value
    python -m anglescript vars examples/hello.as

    # Use custom messages
    python -m anglescript --config quiet.yaml run examples/hello.as
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import load_config
from .engine import Engine, Notification, NotificationKind

DEBUG_ENV_VAR = "ANGLESCRIPT_DEBUG"

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level, build and run summaries
    - Debug (ANGLESCRIPT_DEBUG=1): DEBUG level, every cell and unit
    """
    debug = bool(os.environ.get(DEBUG_ENV_VAR))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("anglescript")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def read_source(file: str) -> Optional[str]:
    """Read program text from a path, or stdin for '-'."""
    if file == "-":
        return sys.stdin.read()
    source_path = Path(file)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return None
    return source_path.read_text()


def make_engine(args) -> Engine:
    """Create an engine whose notifications are printed."""
    engine = Engine(load_config(args.config))

    def show(notification: Notification) -> None:
        if notification.kind is NotificationKind.OUTPUT:
            print(notification.message)
        elif args.json and notification.diagnostic is not None:
            print(json.dumps(notification.diagnostic.to_json(), indent=2), file=sys.stderr)
        else:
            print(notification.message, file=sys.stderr)

    engine.add_observer(show)
    return engine


def cmd_check(args):
    """Build a file without running it."""
    source = read_source(args.file)
    if source is None:
        return 1
    engine = make_engine(args)
    result = engine.build(source)
    if not result.success:
        return 1
    print(f"OK: {result.unit_count} statement(s), {engine.variable_count} variable(s)")
    return 0


def cmd_run(args):
    """Build and run a file."""
    source = read_source(args.file)
    if source is None:
        return 1
    engine = make_engine(args)
    if not engine.build(source).success:
        return 1
    if not engine.run().success:
        return 1
    return 0


def cmd_vars(args):
    """Build and run a file, then list its variables."""
    status = 0
    source = read_source(args.file)
    if source is None:
        return 1
    engine = make_engine(args)
    if not engine.build(source).success or not engine.run().success:
        status = 1
    for cell in engine.cells():
        print(f"{cell.name}: {cell.type_name} = {cell.get_value()!r}")
    return status


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m anglescript',
        description='anglescript compiler and runner',
    )
    parser.add_argument('-c', '--config', metavar='FILE',
                        help='YAML engine configuration')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show build and run summaries')
    parser.add_argument('--json', action='store_true',
                        help='Print errors as JSON diagnostics')

    subparsers = parser.add_subparsers(dest='action', required=True)

    check_parser = subparsers.add_parser('check', help='Build a file and report errors')
    check_parser.add_argument('file', help="Source file ('-' for stdin)")

    run_parser = subparsers.add_parser('run', help='Build and run a file')
    run_parser.add_argument('file', help="Source file ('-' for stdin)")

    vars_parser = subparsers.add_parser('vars', help='Run a file and list its variables')
    vars_parser.add_argument('file', help="Source file ('-' for stdin)")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.action == 'check':
            return cmd_check(args)
        elif args.action == 'run':
            return cmd_run(args)
        elif args.action == 'vars':
            return cmd_vars(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
