"""Execution adapter: one completion contract for every calling convention.

Commands may be written three ways:

    def add(a, b):                      # SYNC: return (or raise)
        return int(a) + int(b)

    def hello(whom, done):              # CALLBACK: done(error, value)
        done(None, f"Hello {whom}")

    async def fetch(args):              # ASYNC: return an awaitable
        ...

However the command completes, the adapter settles a single future with
an Outcome. The first settlement wins and later ones are ignored and
logged: a command that calls ``done`` synchronously *and* returns an
awaitable gets the callback's result.

Binding never inspects the implementation's signature: Positional
values are splayed, Named and NoArgs pass one parameter (the mapping or
None), and CALLBACK commands get ``done`` appended.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from cmdlets.core.types import ArgumentForm, Convention, Outcome

if TYPE_CHECKING:
    from cmdlets.command.registry import CommandSpec
    from cmdlets.display.reporter import Reporter

logger = logging.getLogger(__name__)

DoneCallback = Callable[..., None]


class ExecutionAdapter:
    """Runs a CommandSpec with an ArgumentForm and produces one Outcome.

    Args:
        reporter: Receives per-command feedback ("<name>: done!" or
            "<name>: error ..."). None runs silently.
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter

    async def execute(self, spec: CommandSpec, args: ArgumentForm) -> Outcome:
        """Run ``spec`` and wait for its single outcome.

        Never raises for command errors; they come back as a failed
        Outcome. Cancellation of the awaiting task propagates.
        """
        outcome = await self._settle(spec, args)
        self._feedback(spec, outcome)
        return outcome

    async def _settle(self, spec: CommandSpec, args: ArgumentForm) -> Outcome:
        if args.kind not in spec.accepts:
            accepted = ", ".join(sorted(k.value for k in spec.accepts)) or "nothing"
            return Outcome.failure(
                spec.name,
                TypeError(f"{spec.name} does not take {args.kind.value} arguments "
                          f"(accepts: {accepted})"),
            )

        loop = asyncio.get_running_loop()
        settled: asyncio.Future[Outcome] = loop.create_future()

        def settle(outcome: Outcome) -> None:
            if settled.cancelled():
                return
            if settled.done():
                logger.warning("Command '%s' completed more than once; ignoring %s",
                               spec.name, "error" if outcome.error else "result")
                return
            settled.set_result(outcome)

        def done(error: BaseException | str | None = None, value: Any = None) -> None:
            if error:
                settle(Outcome.failure(spec.name, _as_exception(error)))
            else:
                settle(Outcome.success(spec.name, value))

        call_args = args.bind()
        if spec.convention is Convention.CALLBACK:
            call_args = (*call_args, done)

        try:
            result = spec.run(*call_args)
        except Exception as e:
            settle(Outcome.failure(spec.name, e))
            return await settled

        if settled.done():
            # Synchronous callback is authoritative
            if inspect.isawaitable(result):
                _discard(result)
            return await settled

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            task.add_done_callback(lambda t: settle(_task_outcome(spec.name, t)))
            try:
                return await settled
            except asyncio.CancelledError:
                task.cancel()
                raise
        if spec.convention is not Convention.CALLBACK:
            settle(Outcome.success(spec.name, result))
        # CALLBACK: wait for done(); a command that never calls it stalls here
        return await settled

    def _feedback(self, spec: CommandSpec, outcome: Outcome) -> None:
        if outcome.ok:
            logger.debug("Command '%s' succeeded", spec.name)
            if self._reporter is not None and not spec.hidden:
                self._reporter.success(f"{spec.name}: done!")
        else:
            logger.warning("Command '%s' failed: %s", spec.name, outcome.error)
            if self._reporter is not None:
                self._reporter.error(f"{spec.name}: error {outcome.error}")


def _as_exception(error: BaseException | str) -> BaseException:
    return error if isinstance(error, BaseException) else RuntimeError(str(error))


def _task_outcome(name: str, task: asyncio.Future[Any]) -> Outcome:
    if task.cancelled():
        return Outcome.failure(name, asyncio.CancelledError(f"{name} was cancelled"))
    error = task.exception()
    if error is not None:
        return Outcome.failure(name, error)
    return Outcome.success(name, task.result())


def _discard(awaitable: Any) -> None:
    """Drop an awaitable that lost to a synchronous callback."""
    if inspect.iscoroutine(awaitable):
        awaitable.close()
    else:
        asyncio.ensure_future(awaitable).add_done_callback(
            lambda f: f.cancelled() or f.exception()
        )
