"""Cascade scheduler: runs chains of invocations.

Every CLI token is one chain. Inside a chain the elements run strictly
in order and the first failure stops the chain. Separate chains run
concurrently as asyncio tasks with no ordering between them, and a
failing chain does not disturb its siblings unless exit-on-error is on,
in which case the first failure abandons every chain still in flight
and the run raises RunAborted.

Per chain:
    1. Parse every element (a parse error fails the chain).
    2. Call each element's initializer once with its ChainContext
       (an initializer error fails the chain before anything runs).
    3. Execute the elements in sequence; element i+1 starts only after
       element i succeeded.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from cmdlets.command.chain import (
    ChainContext,
    ChainResult,
    ChainState,
    Invocation,
    step_context,
)
from cmdlets.command.parser import parse_invocation, split_chain
from cmdlets.core.errors import (
    CmdletsError,
    CommandFailed,
    InitializationError,
    ParseError,
    RunAborted,
)
from cmdlets.core.types import Outcome

if TYPE_CHECKING:
    from cmdlets.command.adapter import ExecutionAdapter
    from cmdlets.command.error_log import ErrorLog
    from cmdlets.command.registry import CommandRegistry
    from cmdlets.display.reporter import Reporter

logger = logging.getLogger(__name__)


class CascadeScheduler:
    """Parses, initializes and executes cascade chains.

    Args:
        registry: Resolves command names.
        adapter: Executes single invocations.
        reporter: Receives banners, summaries and the error dump.
        error_log: Shared failure record, keyed by command name.
        exit_on_error: Abort the whole run at the first failure.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        adapter: ExecutionAdapter,
        reporter: Reporter,
        error_log: ErrorLog,
        *,
        exit_on_error: bool = True,
    ) -> None:
        self._registry = registry
        self._adapter = adapter
        self._reporter = reporter
        self._error_log = error_log
        self.exit_on_error = exit_on_error

    async def run(self, tokens: Sequence[str]) -> list[ChainResult]:
        """Run every token as an independent chain.

        Returns:
            One ChainResult per non-empty token, in input order.

        Raises:
            RunAborted: If exit_on_error is set and any chain failed.
        """
        tasks = [
            asyncio.ensure_future(self.run_chain(token))
            for token in tokens
            if split_chain(token)
        ]
        pending: set[asyncio.Future[ChainResult]] = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                failed = next((t.result() for t in done if not t.result().ok), None)
                if failed is not None and self.exit_on_error:
                    logger.info("Exit on error: abandoning %d chain(s)", len(pending))
                    await _abandon(pending)
                    pending = set()
                    self._dump_errors()
                    raise RunAborted(_as_cmdlets_error(failed))
        finally:
            if pending:
                await _abandon(pending)

        self._dump_errors()
        return [t.result() for t in tasks]

    async def run_chain(self, token: str) -> ChainResult:
        """Run one cascade token to completion. Failures are returned, not raised."""
        elements = split_chain(token)
        batch = len(elements) > 1
        label = token.strip() if batch else (elements[0] if elements else "")
        start = time.perf_counter()
        logger.debug("Chain %r: %s", label, ChainState.PENDING.value)

        if batch:
            self._reporter.batch_title(label)

        # 1. Parse
        try:
            invocations = tuple(parse_invocation(e, self._registry) for e in elements)
        except ParseError as e:
            self._reporter.error(e.message)
            self._record(e.command_name or e.token, e)
            return self._finish(label, start, error=e)

        hidden = not batch and bool(invocations) and invocations[0].spec.hidden
        if not batch and invocations and not hidden:
            self._reporter.command_title(invocations[0].spec)

        # 2. Initialize
        contexts: list[ChainContext] = []
        for i, inv in enumerate(invocations):
            contexts.append(ChainContext(
                args=inv.args, index=i, invocations=invocations, steps=contexts,
            ))
        for ctx in contexts:
            init = ctx.invocation.spec.init
            if init is None:
                continue
            try:
                init(ctx)
            except Exception as e:
                error = InitializationError(ctx.invocation.name, e)
                self._reporter.error(error.message)
                self._record(ctx.invocation.name, e)
                return self._finish(label, start, invocations, error=error, hidden=hidden)

        # 3. Execute, fail-fast
        outcome: Outcome | None = None
        for ctx in contexts:
            invocation = ctx.invocation
            logger.debug("Chain %r: %s(%d) %s", label, ChainState.RUNNING.value,
                         ctx.index, invocation.name)
            with step_context(ctx):
                outcome = await self._adapter.execute(invocation.spec, invocation.args)
            if not outcome.ok:
                error = _as_command_failed(invocation, outcome)
                self._record(invocation.name, outcome.error)
                return self._finish(label, start, invocations, outcome, error, hidden)

        return self._finish(label, start, invocations, outcome, hidden=hidden)

    def _finish(
        self,
        label: str,
        start: float,
        invocations: tuple[Invocation, ...] = (),
        outcome: Outcome | None = None,
        error: CmdletsError | None = None,
        hidden: bool = False,
    ) -> ChainResult:
        result = ChainResult(
            token=label,
            invocations=invocations,
            outcome=outcome,
            error=error,
            elapsed=time.perf_counter() - start,
        )
        logger.debug("Chain %r: %s", label, result.state.value)
        self._reporter.chain_summary(
            label,
            _underlying(error),
            elapsed=result.elapsed,
            hidden=hidden,
        )
        return result

    def _record(self, command_name: str, error: BaseException | None) -> None:
        self._error_log.add(command_name, str(error))

    def _dump_errors(self) -> None:
        if self._error_log:
            self._reporter.error_dump(self._error_log)


def _as_command_failed(invocation: Invocation, outcome: Outcome) -> CommandFailed:
    if isinstance(outcome.error, CommandFailed):
        return outcome.error
    return CommandFailed(invocation.name, outcome.error or RuntimeError("unknown error"))


def _underlying(error: CmdletsError | None) -> BaseException | None:
    """The error users should see: the cause for wrapped failures."""
    if isinstance(error, (CommandFailed, InitializationError)):
        return error.cause
    return error


def _as_cmdlets_error(result: ChainResult) -> CmdletsError:
    error = result.error
    if isinstance(error, CmdletsError):
        return error
    return CmdletsError(str(error))


async def _abandon(tasks: set[asyncio.Future[ChainResult]]) -> None:
    """Cancel in-flight chains and let them unwind without reporting."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
