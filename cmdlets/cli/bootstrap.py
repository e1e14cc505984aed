"""Process bootstrap: logging setup and engine construction for the CLI."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from cmdlets.command.engine import Engine
from cmdlets.config.schema import Config

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Configure the cmdlets namespace logger to write to stderr.

    Args:
        verbose: DEBUG when True, otherwise WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))

    cmdlets_logger = logging.getLogger("cmdlets")
    cmdlets_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates on reconfigure
    cmdlets_logger.handlers.clear()
    cmdlets_logger.addHandler(handler)

    # Don't propagate to root logger
    cmdlets_logger.propagate = False


def bootstrap_engine(config: Config, module_dirs: Sequence[Path] = ()) -> Engine:
    """Create the engine and load every module directory.

    Config module directories load first, then ``module_dirs`` from the
    command line.
    """
    engine = Engine.create(config)
    for directory in module_dirs:
        groups = engine.add_module_dir(directory)
        logger.info("Loaded modules from %s: %s", directory, groups)
    return engine
