"""Core types for cmdlets.

This module defines the value objects passed between the parser, the
execution adapter and the cascade scheduler: argument forms, calling
conventions and execution outcomes. All dataclasses are frozen.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from cmdlets.core.errors import CommandFailed


class ArgKind(Enum):
    """Shape of a parsed argument list."""

    NONE = "none"
    POSITIONAL = "positional"
    NAMED = "named"


class Convention(Enum):
    """How a command implementation reports completion.

    Attributes:
        SYNC: Returns its value directly (or raises).
        CALLBACK: Takes a trailing ``done(error, value)`` callable.
        ASYNC: Returns an awaitable (coroutine functions infer this).
    """

    SYNC = "sync"
    CALLBACK = "callback"
    ASYNC = "async"


# --- Argument forms ---


@dataclass(frozen=True)
class NoArgs:
    """Bare command name or empty argument list."""

    kind = ArgKind.NONE

    def bind(self) -> tuple[Any, ...]:
        """Call arguments: a single ``None`` parameter."""
        return (None,)


@dataclass(frozen=True)
class Positional:
    """Comma-separated argument strings, trimmed, never coerced.

    Attributes:
        values: The argument tokens in order.
    """

    values: tuple[str, ...]
    kind = ArgKind.POSITIONAL

    def bind(self) -> tuple[Any, ...]:
        """Call arguments: one parameter per value."""
        return self.values


@dataclass(frozen=True)
class Named:
    """Key/value arguments from a relaxed object literal.

    Attributes:
        values: Read-only mapping of argument names to parsed values.
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    kind = ArgKind.NAMED

    def __post_init__(self) -> None:
        if not isinstance(self.values, MappingProxyType):
            object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def bind(self) -> tuple[Any, ...]:
        """Call arguments: the whole mapping as a single parameter."""
        return (self.values,)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]


ArgumentForm = NoArgs | Positional | Named

NO_ARGS = NoArgs()


def as_argument_form(args: Any) -> ArgumentForm:
    """Coerce a programmatic argument value into an ArgumentForm.

    None gives NoArgs, a list/tuple gives Positional (items stringified),
    a mapping gives Named. ArgumentForm instances pass through.

    Raises:
        TypeError: For any other value.
    """
    if args is None:
        return NO_ARGS
    if isinstance(args, (NoArgs, Positional, Named)):
        return args
    if isinstance(args, (list, tuple)):
        return Positional(tuple(str(a) for a in args))
    if isinstance(args, Mapping):
        return Named(args)
    raise TypeError(f"cannot use {type(args).__name__} as command arguments")


# --- Outcomes ---


@dataclass(frozen=True)
class Outcome:
    """Result of running one invocation: a value or an error, never both.

    Attributes:
        command_name: The command that produced this outcome.
        value: Success payload (opaque to the engine).
        error: The failure, or None on success.
    """

    command_name: str
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """Return True if the command succeeded."""
        return self.error is None

    @classmethod
    def success(cls, command_name: str, value: Any = None) -> Outcome:
        return cls(command_name=command_name, value=value)

    @classmethod
    def failure(cls, command_name: str, error: BaseException) -> Outcome:
        return cls(command_name=command_name, error=error)

    def unwrap(self) -> Any:
        """Return the value, or raise CommandFailed carrying the error."""
        if self.error is None:
            return self.value
        if isinstance(self.error, CommandFailed):
            raise self.error
        raise CommandFailed(self.command_name, self.error) from self.error
