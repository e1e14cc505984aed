"""Engine: the facade command modules and the CLI talk to.

The engine owns the registry, the reporter, the error log, the
execution adapter and the cascade scheduler.

Example:
    engine = Engine.create(load_config())
    engine.add_module_dir(Path("modules"))
    results = await engine.run(["add(2,3)", "hello(world) * repeat(3)"])
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from types import ModuleType
from typing import Any

from cmdlets.command.adapter import ExecutionAdapter
from cmdlets.command.builtin import BUILTIN_MODULES
from cmdlets.command.chain import ChainResult
from cmdlets.command.error_log import ErrorLog
from cmdlets.command.modules import load_module, load_module_dir, load_module_file
from cmdlets.command.registry import (
    ALL_ARG_KINDS,
    CommandPredicate,
    CommandRegistry,
    CommandSpec,
    Initializer,
    RegistryListener,
)
from cmdlets.command.scheduler import CascadeScheduler
from cmdlets.config.schema import Config
from cmdlets.core.constants import BUILTIN_GROUP, SHOW_HIDDEN_ENV
from cmdlets.core.types import ArgKind, Convention, as_argument_form
from cmdlets.core.utils import env_flag
from cmdlets.display.reporter import Reporter

logger = logging.getLogger(__name__)

CMD_ADDED = "cmd_added"


class Engine:
    """Command registry plus invocation engine.

    Args:
        config: Behavior settings (exit-on-error, menu visibility, module
            settings). Defaults to Config().
        reporter: Output sink. Defaults to a Reporter on the shared console.
        registry: Command registry. Defaults to an empty one.
    """

    def __init__(
        self,
        config: Config | None = None,
        reporter: Reporter | None = None,
        registry: CommandRegistry | None = None,
    ) -> None:
        self.config = config or Config()
        self.registry = registry or CommandRegistry()
        self.reporter = reporter or Reporter()
        self.error_log = ErrorLog()
        self.adapter = ExecutionAdapter(self.reporter)
        self.scheduler = CascadeScheduler(
            self.registry,
            self.adapter,
            self.reporter,
            self.error_log,
            exit_on_error=self.config.exit_on_error,
        )

    @classmethod
    def create(cls, config: Config | None = None, reporter: Reporter | None = None) -> Engine:
        """Build an engine with built-ins loaded (and hidden) plus config.module_dirs."""
        engine = cls(config, reporter)
        engine.load_builtins()
        for directory in engine.config.module_dirs:
            engine.add_module_dir(Path(directory))
        return engine

    @property
    def exit_on_error(self) -> bool:
        return self.scheduler.exit_on_error

    @exit_on_error.setter
    def exit_on_error(self, value: bool) -> None:
        self.scheduler.exit_on_error = value

    # === Registration ===

    def register(
        self,
        name: str,
        run: Callable[..., Any],
        *,
        help: str = "",
        group: str = "",
        hidden: bool = False,
        convention: Convention | None = None,
        init: Initializer | None = None,
        accepts: Iterable[ArgKind] | None = None,
    ) -> CommandSpec:
        """Register a command directly. Module code should use its registrar."""
        return self.registry.register(CommandSpec(
            name=name,
            run=run,
            help=help,
            group=group,
            hidden=hidden,
            convention=convention,
            init=init,
            accepts=ALL_ARG_KINDS if accepts is None else frozenset(accepts),
        ))

    def get_command(self, name: str) -> CommandSpec | None:
        return self.registry.get(name)

    def get_commands(self, predicate: CommandPredicate) -> list[CommandSpec]:
        return self.registry.list_where(predicate)

    def on(self, event: str, callback: RegistryListener) -> None:
        """Subscribe to engine events. Only ``"cmd_added"`` exists."""
        if event != CMD_ADDED:
            raise ValueError(f"unknown event: {event!r}")
        self.registry.add_listener(callback)

    # === Modules ===

    def add_module(self, module: ModuleType | str, group: str | None = None) -> str:
        return load_module(self, module, group)

    def add_module_file(self, path: Path, group: str | None = None) -> str:
        return load_module_file(self, path, group)

    def add_module_dir(self, directory: Path) -> list[str]:
        return load_module_dir(self, directory)

    def load_builtins(self) -> int:
        """Load the built-in modules, then hide every command registered so far.

        Returns:
            Number of commands hidden.
        """
        for module in BUILTIN_MODULES:
            load_module(self, module, BUILTIN_GROUP)
        hidden = self.registry.mark_hidden(lambda spec: True)
        logger.debug("Loaded built-ins, %d commands hidden", hidden)
        return hidden

    # === Execution ===

    async def run(self, tokens: Sequence[str] | str | None = None) -> list[ChainResult]:
        """Run invocation tokens; each token is one cascade chain.

        Args:
            tokens: A token list, a single token, or None for sys.argv[1:].
                An empty list shows the menu instead.

        Raises:
            RunAborted: If exit-on-error is on and a chain failed.
        """
        if tokens is None:
            tokens = sys.argv[1:]
        elif isinstance(tokens, str):
            tokens = [tokens]

        if not tokens:
            self.show_menu()
            return []
        return await self.scheduler.run(list(tokens))

    async def run_command(self, command: CommandSpec | str, args: Any = None) -> Any:
        """Run one command outside the cascade grammar.

        Args:
            command: A CommandSpec or a registered name.
            args: An ArgumentForm, a list (positional), a mapping (named)
                or None.

        Returns:
            The command's result value.

        Raises:
            UnknownCommand: If ``command`` names no registered command.
            CommandFailed: If the command fails.
        """
        spec = command if isinstance(command, CommandSpec) else self.registry.lookup(command)
        outcome = await self.adapter.execute(spec, as_argument_form(args))
        return outcome.unwrap()

    # === Menu ===

    @property
    def show_hidden(self) -> bool:
        """Menus include hidden commands (config or SHOW_HIDDEN_CMD)."""
        return self.config.show_hidden or env_flag(os.environ.get(SHOW_HIDDEN_ENV))

    def show_menu(self, prog: str | None = None) -> None:
        self.reporter.menu(
            self.registry.groups(),
            show_hidden=self.show_hidden,
            prog=prog or Path(sys.argv[0]).name or "cmdlets",
        )

    def show_group_menu(
        self,
        group: str,
        specs: Iterable[CommandSpec],
        show_hidden: bool = True,
    ) -> None:
        self.reporter.group_menu(group, specs, show_hidden=show_hidden)

    # === Output ===

    def message(self, text: object) -> None:
        self.reporter.message(text)

    def warning(self, text: object) -> None:
        self.reporter.warning(text)

    def error(self, text: object) -> None:
        self.reporter.error(text)

    def success(self, text: object) -> None:
        self.reporter.success(text)
