"""Argument parsing for the cmdlets CLI."""

import argparse
from collections.abc import Sequence
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdlets",
        description="Run registered commands. Each argument is one chain; "
        "'*' chains commands in sequence, e.g. \"build * delay(5) * deploy\". "
        "With no arguments the command menu is shown.",
    )
    parser.add_argument(
        "invocations",
        nargs="*",
        metavar="INVOCATION",
        help="command invocation, e.g. add(2,3) or sub(a: 5, b: 2)",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        metavar="PATH",
        help="Config file (default: ~/.cmdlets/config.json merged with ./.cmdlets/config.json)",
    )
    parser.add_argument(
        "--modules", "-m",
        action="append",
        type=Path,
        default=[],
        dest="module_dirs",
        metavar="DIR",
        help="Directory of command modules to load (can be repeated)",
    )
    parser.add_argument(
        "--no-exit-on-error",
        action="store_false",
        dest="exit_on_error",
        default=None,
        help="Keep running other chains when a command fails",
    )
    parser.add_argument(
        "--show-hidden",
        action="store_true",
        default=None,
        help="Include hidden built-in commands in the menu",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging to stderr",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
