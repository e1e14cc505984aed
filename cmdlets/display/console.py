"""Shared Rich Console instance for cmdlets."""

from __future__ import annotations

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Get the shared Console instance.

    Created on first access. Markup and highlighting are off: command
    output is printed as plain text with explicit styles.
    """
    global _console
    if _console is None:
        _console = Console(highlight=False, markup=False)
    return _console


def set_console(console: Console | None) -> None:
    """Set a custom Console instance (None restores the default on next access).

    Useful for testing or custom configurations.
    """
    global _console
    _console = console
