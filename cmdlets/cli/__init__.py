"""Command-line interface."""

from cmdlets.cli.main import run_cli

__all__ = ["run_cli"]
