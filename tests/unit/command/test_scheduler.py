"""Unit tests for CascadeScheduler.

Tests for:
- Sequential, fail-fast execution within a chain
- Initializers running before any element executes
- Parse failures staying inside their chain
- Independent chains running concurrently
- Exit-on-error aborting the run
- Banners, summaries and the error dump
"""

import asyncio

import pytest

from cmdlets.command.adapter import ExecutionAdapter
from cmdlets.command.chain import ChainState, current_step
from cmdlets.command.error_log import ErrorLog
from cmdlets.command.registry import CommandSpec
from cmdlets.command.scheduler import CascadeScheduler
from cmdlets.core.errors import (
    CommandFailed,
    InitializationError,
    RunAborted,
    UnknownCommand,
)
from cmdlets.core.types import Positional


@pytest.fixture
def error_log():
    return ErrorLog()


@pytest.fixture
def calls():
    return []


@pytest.fixture
def scheduler(registry, reporter, error_log, calls):
    """Scheduler over a registry of recording commands."""

    def record(name):
        def run(*args):
            calls.append(name)
            return name
        return run

    for name in ("a", "b", "c"):
        registry.register(CommandSpec(name=name, run=record(name), help=f"{name} help"))

    def fail(_):
        calls.append("fail")
        raise RuntimeError("fail broke")

    registry.register(CommandSpec(name="fail", run=fail))
    registry.register(CommandSpec(
        name="add",
        run=lambda x, y: int(x) + int(y),
        help="addition",
        group="math",
    ))
    return CascadeScheduler(
        registry,
        ExecutionAdapter(reporter),
        reporter,
        error_log,
        exit_on_error=False,
    )


class TestSingleChain:
    """Execution order and results within one chain."""

    @pytest.mark.asyncio
    async def test_single_command(self, scheduler):
        [result] = await scheduler.run(["add(2,3)"])
        assert result.ok
        assert result.state is ChainState.COMPLETED
        assert result.token == "add(2,3)"
        assert result.outcome.value == 5
        assert result.elapsed >= 0

    @pytest.mark.asyncio
    async def test_elements_run_in_order(self, scheduler, calls):
        [result] = await scheduler.run(["a * b * c"])
        assert result.ok
        assert calls == ["a", "b", "c"]
        assert result.outcome.value == "c"
        assert [inv.name for inv in result.invocations] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_fail_fast(self, scheduler, calls, error_log):
        [result] = await scheduler.run(["a * fail * c"])

        assert not result.ok
        assert result.state is ChainState.FAILED
        assert calls == ["a", "fail"]
        assert isinstance(result.error, CommandFailed)
        assert str(result.error.cause) == "fail broke"
        assert result.outcome.command_name == "fail"
        assert error_log.get("fail") == ["fail broke"]

    @pytest.mark.asyncio
    async def test_each_step_waits_for_previous(self, registry, scheduler):
        order = []

        async def slow(_):
            await asyncio.sleep(0.02)
            order.append("slow")

        registry.register(CommandSpec(name="slow", run=slow))
        registry.register(CommandSpec(name="fast", run=lambda _: order.append("fast")))

        await scheduler.run(["slow * fast"])
        assert order == ["slow", "fast"]


class TestParseFailures:
    """A chain that does not parse fails without running anything."""

    @pytest.mark.asyncio
    async def test_unknown_command(self, scheduler, calls, error_log, output):
        [result] = await scheduler.run(["a * nope(1)"])

        assert not result.ok
        assert isinstance(result.error, UnknownCommand)
        assert calls == []
        assert result.invocations == ()
        assert error_log.get("nope") == ["Invalid command: nope"]
        assert "Invalid command: nope" in output()

    @pytest.mark.asyncio
    async def test_unterminated_recorded_under_name(self, scheduler, error_log):
        [result] = await scheduler.run(["a(1"])
        assert not result.ok
        assert len(error_log.get("a")) == 1
        assert 'no ending ")"' in error_log.get("a")[0]

    @pytest.mark.asyncio
    async def test_other_chains_still_run(self, scheduler, calls):
        results = await scheduler.run(["nope", "b"])
        assert [r.ok for r in results] == [False, True]
        assert calls == ["b"]


class TestInitializers:
    """Initializers run once per element before the chain executes."""

    @pytest.mark.asyncio
    async def test_contexts(self, registry, scheduler):
        seen = []

        def init(ctx):
            seen.append((ctx.index, ctx.total, ctx.previous and ctx.previous.name, ctx.args))
            ctx.state["marker"] = ctx.index

        registry.register(CommandSpec(
            name="watch",
            run=lambda *a: current_step().state["marker"],
            init=init,
        ))

        [result] = await scheduler.run(["a * watch(1) * watch"])

        assert result.ok
        assert seen[0] == (1, 3, "a", Positional(("1",)))
        assert seen[1][:3] == (2, 3, "watch")
        # The running step sees the context its initializer wrote
        assert result.outcome.value == 2

    @pytest.mark.asyncio
    async def test_all_initializers_before_execution(self, registry, scheduler, calls):
        def init(ctx):
            calls.append(f"init{ctx.index}")

        registry.register(CommandSpec(name="i", run=lambda *a: calls.append("run"), init=init))
        await scheduler.run(["i * i"])
        assert calls == ["init0", "init1", "run", "run"]

    @pytest.mark.asyncio
    async def test_single_command_initializer(self, registry, scheduler, calls):
        registry.register(CommandSpec(
            name="solo",
            run=lambda *a: None,
            init=lambda ctx: calls.append(("init", ctx.index, ctx.total)),
        ))
        await scheduler.run(["solo"])
        assert calls == [("init", 0, 1)]

    @pytest.mark.asyncio
    async def test_previous_step_is_shared_context(self, registry, scheduler, calls):
        seen = {}

        def init(ctx):
            ctx.state["index"] = ctx.index
            seen[ctx.index] = ctx.previous_step

        registry.register(CommandSpec(name="s", run=lambda *a: None, init=init))
        await scheduler.run(["s * s"])

        assert seen[0] is None
        assert seen[1].index == 0
        assert seen[1].state == {"index": 0}

    @pytest.mark.asyncio
    async def test_initializer_failure(self, registry, scheduler, calls, error_log):
        def bad_init(ctx):
            raise ValueError("bad count")

        registry.register(CommandSpec(name="bad", run=lambda *a: None, init=bad_init))
        [result] = await scheduler.run(["a * b * bad"])

        assert not result.ok
        assert isinstance(result.error, InitializationError)
        assert calls == []
        assert error_log.get("bad") == ["bad count"]

    @pytest.mark.asyncio
    async def test_current_step_outside_chain(self):
        with pytest.raises(LookupError):
            current_step()


class TestConcurrency:
    """Separate chains run concurrently and report in input order."""

    @pytest.mark.asyncio
    async def test_chains_interleave(self, registry, scheduler):
        ready = asyncio.Event()

        async def waiter(_):
            await ready.wait()
            return "woke"

        registry.register(CommandSpec(name="waiter", run=waiter))
        registry.register(CommandSpec(name="signal", run=lambda _: ready.set()))

        results = await asyncio.wait_for(scheduler.run(["waiter", "signal"]), timeout=2)
        assert [r.token for r in results] == ["waiter", "signal"]
        assert results[0].outcome.value == "woke"

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_siblings(self, scheduler, calls):
        results = await scheduler.run(["fail", "a * b"])
        assert [r.ok for r in results] == [False, True]
        assert "a" in calls and "b" in calls

    @pytest.mark.asyncio
    async def test_empty_tokens_skipped(self, scheduler):
        assert await scheduler.run(["", " * "]) == []

    @pytest.mark.asyncio
    async def test_empty_elements_dropped(self, scheduler, calls):
        [result] = await scheduler.run(["a * * b"])
        assert result.ok
        assert calls == ["a", "b"]


class TestExitOnError:
    """With exit_on_error the first failure aborts the run."""

    @pytest.mark.asyncio
    async def test_raises_run_aborted(self, scheduler):
        scheduler.exit_on_error = True
        with pytest.raises(RunAborted) as exc_info:
            await scheduler.run(["fail"])
        assert exc_info.value.exit_code == 1
        assert isinstance(exc_info.value.failure, CommandFailed)

    @pytest.mark.asyncio
    async def test_abandons_in_flight_chains(self, registry, scheduler):
        cancelled = []

        async def forever(_):
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        registry.register(CommandSpec(name="forever", run=forever))
        scheduler.exit_on_error = True

        with pytest.raises(RunAborted):
            await asyncio.wait_for(scheduler.run(["forever", "fail"]), timeout=2)
        await asyncio.sleep(0)
        assert cancelled == [True]

    @pytest.mark.asyncio
    async def test_parse_failure_aborts(self, scheduler):
        scheduler.exit_on_error = True
        with pytest.raises(RunAborted) as exc_info:
            await scheduler.run(["nope"])
        assert isinstance(exc_info.value.failure, UnknownCommand)

    @pytest.mark.asyncio
    async def test_all_success_returns(self, scheduler):
        scheduler.exit_on_error = True
        results = await scheduler.run(["a", "b * c"])
        assert all(r.ok for r in results)

    @pytest.mark.asyncio
    async def test_errors_dumped_before_abort(self, scheduler, output):
        scheduler.exit_on_error = True
        with pytest.raises(RunAborted):
            await scheduler.run(["fail"])
        assert "fail: errors [ 1]" in output()


class TestReporting:
    """Banners, summaries and the error dump."""

    @pytest.mark.asyncio
    async def test_single_command_banners(self, scheduler, output):
        await scheduler.run(["add(2,3)"])
        text = output()
        assert "[add]: addition" in text
        assert "add: done!" in text
        assert "[add(2,3)]: OK" in text
        assert "add(2,3): " in text and "ms" in text

    @pytest.mark.asyncio
    async def test_batch_banners(self, scheduler, output):
        await scheduler.run(["a * b"])
        text = output()
        assert "Running Batch Serial Cmds [a * b]..." in text
        assert "[a * b]: OK" in text
        assert "[a]: a help" not in text

    @pytest.mark.asyncio
    async def test_failure_summary(self, scheduler, output):
        await scheduler.run(["fail"])
        assert "[fail]: err = fail broke" in output()

    @pytest.mark.asyncio
    async def test_hidden_single_command_is_quiet(self, registry, scheduler, output):
        registry.register(CommandSpec(name="quiet", run=lambda _: 1, help="shh", hidden=True))
        await scheduler.run(["quiet"])
        text = output()
        assert "[quiet]: shh" not in text
        assert "[quiet]: OK" not in text
        assert "quiet: done!" not in text
        assert "ms" not in text

    @pytest.mark.asyncio
    async def test_hidden_failure_still_reported(self, registry, scheduler, output):
        def broken(_):
            raise RuntimeError("hidden broke")

        registry.register(CommandSpec(name="hb", run=broken, hidden=True))
        await scheduler.run(["hb"])
        assert "[hb]: err = hidden broke" in output()

    @pytest.mark.asyncio
    async def test_error_dump_once_at_end(self, scheduler, output):
        await scheduler.run(["fail", "fail * a", "b"])
        text = output()
        assert text.count("fail: errors [ 2]") == 1
        assert "[0]: fail broke" in text
        assert "[1]: fail broke" in text

    @pytest.mark.asyncio
    async def test_no_dump_without_errors(self, scheduler, output):
        await scheduler.run(["a"])
        assert "errors [" not in output()
