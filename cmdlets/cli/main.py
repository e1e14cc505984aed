"""Entry point for the cmdlets CLI."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from cmdlets.cli import exit_codes
from cmdlets.cli.arg_parser import parse_args
from cmdlets.cli.bootstrap import bootstrap_engine, configure_logging
from cmdlets.config.loader import load_config
from cmdlets.core.errors import ConfigError, ModuleLoadError, RunAborted
from cmdlets.display.reporter import Reporter

logger = logging.getLogger(__name__)


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit status."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
        overrides = {
            key: value
            for key, value in (
                ("exit_on_error", args.exit_on_error),
                ("show_hidden", args.show_hidden),
            )
            if value is not None
        }
        if overrides:
            config = config.model_copy(update=overrides)
        engine = bootstrap_engine(config, args.module_dirs)
    except (ConfigError, ModuleLoadError) as e:
        Reporter().error(f"Error: {e.message}")
        return exit_codes.USAGE_ERROR

    try:
        asyncio.run(engine.run(args.invocations))
    except RunAborted as e:
        logger.debug("Run aborted: %s", e.failure)
        return e.exit_code
    except KeyboardInterrupt:
        return exit_codes.KEYBOARD_INTERRUPT
    return exit_codes.SUCCESS


def main() -> None:
    """Console script entry point."""
    raise SystemExit(run_cli())
