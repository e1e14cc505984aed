"""Shared pytest fixtures and configuration for pytest."""

import io
import logging
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from cmdlets.command.engine import Engine
from cmdlets.command.registry import CommandRegistry
from cmdlets.config.schema import Config
from cmdlets.display.console import set_console
from cmdlets.display.reporter import Reporter

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


@pytest.fixture
def console() -> Console:
    """Plain-text console writing to an in-memory buffer."""
    return Console(
        file=io.StringIO(),
        width=200,
        color_system=None,
        force_terminal=False,
        highlight=False,
        markup=False,
    )


@pytest.fixture
def output(console: Console) -> Callable[[], str]:
    """Return everything printed to the captured console so far."""
    return lambda: console.file.getvalue()


@pytest.fixture
def reporter(console: Console) -> Reporter:
    return Reporter(console)


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def engine(reporter: Reporter) -> Engine:
    """Engine with built-ins loaded; failures do not abort the run."""
    return Engine.create(Config(exit_on_error=False), reporter)


@pytest.fixture
def examples_dir() -> Path:
    return EXAMPLES_DIR


@pytest.fixture(autouse=True)
def _shared_console(console: Console, monkeypatch: pytest.MonkeyPatch):
    """Route the shared console to the capture buffer and isolate SHOW_HIDDEN_CMD."""
    monkeypatch.delenv("SHOW_HIDDEN_CMD", raising=False)
    set_console(console)
    yield
    set_console(None)


@pytest.fixture(autouse=True)
def _restore_cmdlets_logger():
    """Undo configure_logging() so caplog keeps seeing cmdlets records."""
    cmdlets_logger = logging.getLogger("cmdlets")
    saved = (cmdlets_logger.level, list(cmdlets_logger.handlers), cmdlets_logger.propagate)
    yield
    cmdlets_logger.setLevel(saved[0])
    cmdlets_logger.handlers[:] = saved[1]
    cmdlets_logger.propagate = saved[2]
