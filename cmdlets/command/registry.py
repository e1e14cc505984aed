"""Command registry: name -> CommandSpec.

The registry is written during module loading and read-only while
invocations run, so it needs no locking.

Example:
    from cmdlets.command.registry import CommandRegistry, CommandSpec

    registry = CommandRegistry()
    registry.register(CommandSpec(name="add", run=lambda a, b: int(a) + int(b)))

    spec = registry.lookup("add")
    math_cmds = registry.list_where(lambda s: s.group == "math")
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cmdlets.core.errors import InvalidDescriptor, UnknownCommand
from cmdlets.core.types import ArgKind, Convention

if TYPE_CHECKING:
    from cmdlets.command.chain import ChainContext

logger = logging.getLogger(__name__)

CommandPredicate = Callable[["CommandSpec"], bool]
Initializer = Callable[["ChainContext"], None]
RegistryListener = Callable[["CommandSpec"], None]

ALL_ARG_KINDS: frozenset[ArgKind] = frozenset(ArgKind)


@dataclass
class CommandSpec:
    """Registered metadata and implementation for one command.

    Attributes:
        name: Unique registry key.
        run: The implementation entry point.
        help: One-line help text shown in menus.
        group: Menu group; module registration fills in the module's name.
        hidden: Hidden commands are left out of menus but stay invocable.
        convention: How ``run`` reports completion. None infers ASYNC for
            coroutine functions and SYNC otherwise; CALLBACK must be explicit.
        init: Optional one-time chain initializer.
        accepts: Argument forms the command takes; others fail before ``run``.
    """

    name: str
    run: Callable[..., Any]
    help: str = ""
    group: str = ""
    hidden: bool = False
    convention: Convention | None = None
    init: Initializer | None = None
    accepts: frozenset[ArgKind] = field(default=ALL_ARG_KINDS)

    def __post_init__(self) -> None:
        if self.convention is None:
            self.convention = (
                Convention.ASYNC
                if inspect.iscoroutinefunction(self.run)
                else Convention.SYNC
            )
        self.accepts = frozenset(self.accepts)

    @property
    def is_async(self) -> bool:
        """True unless the command returns its value synchronously."""
        return self.convention is not Convention.SYNC


class CommandRegistry:
    """In-memory mapping of command names to CommandSpecs.

    Re-registering a name replaces the previous spec entirely (last write
    wins, nothing is merged); the command keeps its original position in
    listing order.
    """

    def __init__(self) -> None:
        self._specs: dict[str, CommandSpec] = {}
        self._listeners: list[RegistryListener] = []

    def register(self, spec: CommandSpec) -> CommandSpec:
        """Insert or replace a command.

        Args:
            spec: The command descriptor.

        Returns:
            The stored spec.

        Raises:
            InvalidDescriptor: If the name is empty or run is not callable.
        """
        if not isinstance(spec.name, str) or not spec.name.strip():
            raise InvalidDescriptor(f"command name must be a non-empty string: {spec.name!r}")
        if not callable(spec.run):
            raise InvalidDescriptor(f"command '{spec.name}' has no callable implementation")

        if spec.name in self._specs:
            logger.debug("Replacing command: %s", spec.name)
        self._specs[spec.name] = spec
        logger.debug("Registered command %s (group=%r, %s)", spec.name, spec.group,
                     spec.convention.value)

        for listener in self._listeners:
            listener(spec)
        return spec

    def add_listener(self, listener: RegistryListener) -> None:
        """Call ``listener(spec)`` after every successful register()."""
        self._listeners.append(listener)

    def get(self, name: str) -> CommandSpec | None:
        """Get a command by name, or None if not registered."""
        return self._specs.get(name)

    def lookup(self, name: str) -> CommandSpec:
        """Get a command by name.

        Raises:
            UnknownCommand: If no command is registered under ``name``.
        """
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownCommand(name)
        return spec

    def list_where(self, predicate: CommandPredicate) -> list[CommandSpec]:
        """Commands matching ``predicate``, in registration order."""
        return [spec for spec in self._specs.values() if predicate(spec)]

    def mark_hidden(self, predicate: CommandPredicate) -> int:
        """Hide every command matching ``predicate``.

        Returns:
            Number of commands hidden.
        """
        matched = self.list_where(predicate)
        for spec in matched:
            spec.hidden = True
        return len(matched)

    def groups(self, specs: Iterable[CommandSpec] | None = None) -> dict[str, list[CommandSpec]]:
        """Commands bucketed by group, groups in first-seen order."""
        result: dict[str, list[CommandSpec]] = {}
        for spec in self._specs.values() if specs is None else specs:
            result.setdefault(spec.group, []).append(spec)
        return result

    def names(self) -> list[str]:
        return list(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)
