"""Cascade chain types and the per-step execution context.

A chain is the ordered list of invocations parsed from one CLI token
(``"a * b(1) * repeat(3)"``). Each invocation gets a ChainContext: the
initializer receives it once before the chain starts, and while the
invocation runs the same object is available from ``current_step()``.
``repeat`` re-runs the previous step inside that step's own context.

The current step is tracked in a ContextVar, so concurrently running
chains (separate asyncio tasks) each see their own step.

Example:
    def init(ctx: ChainContext) -> None:
        ctx.state["previous"] = ctx.previous_step

    async def run(count):
        previous = current_step().state["previous"]
        with step_context(previous):
            ...
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from cmdlets.core.types import ArgumentForm, Outcome

if TYPE_CHECKING:
    from cmdlets.command.registry import CommandSpec


@dataclass(frozen=True)
class Invocation:
    """One parsed, resolved call site.

    Attributes:
        spec: The resolved command.
        args: The parsed argument form.
        token: The chain element text this was parsed from.
    """

    spec: CommandSpec
    args: ArgumentForm
    token: str = ""

    @property
    def name(self) -> str:
        return self.spec.name


class ChainState(Enum):
    """Lifecycle of one chain: PENDING -> RUNNING(i) -> COMPLETED | FAILED."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ChainContext:
    """What an invocation knows about the chain it belongs to.

    Attributes:
        args: This invocation's own argument form.
        index: Zero-based position in the chain.
        invocations: Every invocation in the chain, in order.
        state: Scratch space private to this invocation for this run.
        steps: The contexts of every step in the chain, shared by all of
            them. Empty when the context was built on its own.
    """

    args: ArgumentForm
    index: int
    invocations: tuple[Invocation, ...]
    state: dict[str, Any] = field(default_factory=dict)
    steps: list[ChainContext] = field(default_factory=list, repr=False, compare=False)

    @property
    def invocation(self) -> Invocation:
        return self.invocations[self.index]

    @property
    def previous(self) -> Invocation | None:
        """The invocation immediately before this one, or None at index 0."""
        return self.invocations[self.index - 1] if self.index > 0 else None

    @property
    def previous_step(self) -> ChainContext | None:
        """Context of the previous step, or None at index 0 or without steps."""
        if self.index == 0 or len(self.steps) < self.index:
            return None
        return self.steps[self.index - 1]

    @property
    def total(self) -> int:
        return len(self.invocations)


@dataclass(frozen=True)
class ChainResult:
    """Reported result of one chain.

    Attributes:
        token: The raw CLI token (the chain's identity).
        invocations: The parsed chain (empty if parsing failed).
        outcome: Outcome of the last executed step; the failing one on
            failure. None only when the chain failed before any step ran.
        error: The chain's failure, if any.
        elapsed: Wall time in seconds.
    """

    token: str
    invocations: tuple[Invocation, ...] = ()
    outcome: Outcome | None = None
    error: BaseException | None = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def state(self) -> ChainState:
        return ChainState.COMPLETED if self.ok else ChainState.FAILED


_current_step: ContextVar[ChainContext | None] = ContextVar(
    "cmdlets_current_step",
    default=None,
)


def current_step() -> ChainContext:
    """Context of the chain step currently executing in this task.

    Raises:
        LookupError: If called outside a running chain step.
    """
    ctx = _current_step.get()
    if ctx is None:
        raise LookupError("no chain step is running")
    return ctx


@contextmanager
def step_context(ctx: ChainContext) -> Iterator[ChainContext]:
    """Make ``ctx`` the current step for the duration of the with block."""
    token = _current_step.set(ctx)
    try:
        yield ctx
    finally:
        _current_step.reset(token)
