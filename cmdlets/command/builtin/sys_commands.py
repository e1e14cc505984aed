"""Built-in ``sys`` commands: delay, repeat and help.

These are hidden from the menu after loading but can always be invoked
by name, typically inside a cascade:

    "build * delay(5) * deploy"
    "ping * repeat(3, 1)"
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from cmdlets.command.chain import ChainContext, current_step, step_context
from cmdlets.command.modules import ModuleRegistrar
from cmdlets.core.types import ArgKind, Positional

logger = logging.getLogger(__name__)

REPEAT = "repeat"


def setup(registrar: ModuleRegistrar) -> None:
    engine = registrar.engine

    # --- delay ---

    async def delay(seconds: str) -> None:
        registrar.message(f"delay {seconds} seconds...")
        await asyncio.sleep(float(seconds))

    registrar.command(
        "delay",
        delay,
        help="delay cmd execution, delay(seconds)",
        accepts={ArgKind.POSITIONAL},
    )

    # --- repeat ---

    def repeat_init(ctx: ChainContext) -> None:
        _repeat_count(ctx.args)
        previous = ctx.previous
        if previous is None:
            registrar.warning("no previous cmd, repeat ignored.")
        elif previous.name == REPEAT:
            raise ValueError("repeat cannot repeat another repeat")
        ctx.state["previous"] = ctx.previous_step

    async def repeat(count: str, interval: str = "0") -> int:
        try:
            previous: ChainContext | None = current_step().state.get("previous")
        except LookupError:
            previous = None
        if previous is None:
            logger.debug("repeat has no previous invocation, skipping")
            return 0

        pause = float(interval)
        invocation = previous.invocation
        # The previous command already ran once as part of the chain
        remaining = int(count) - 1
        for _ in range(remaining):
            if pause > 0:
                await asyncio.sleep(pause)
            with step_context(previous):
                await engine.run_command(invocation.spec, invocation.args)
        return remaining

    registrar.command(
        REPEAT,
        repeat,
        help="repeat cmd execution, repeat(count, [interval=0])",
        init=repeat_init,
        accepts={ArgKind.POSITIONAL},
    )

    # --- help ---

    def help_(group: Any = None) -> None:
        if isinstance(group, Mapping):
            group = group.get("group")
        if not group:
            engine.show_menu()
            return

        specs = engine.get_commands(lambda spec: spec.group == group)
        if not specs:
            registrar.message("no cmdlet in this group")
            return
        engine.show_group_menu(group, specs, show_hidden=True)

    registrar.command(
        "help",
        help_,
        help="show sub-menu of a group, show top menu if no group specified. "
        "ex: help([grp_name])",
    )


def _repeat_count(args: Any) -> int:
    if not isinstance(args, Positional) or not args.values:
        raise ValueError("usage: repeat(count, [interval=0])")
    try:
        count = int(args.values[0])
    except ValueError:
        raise ValueError(f"repeat's count must be an integer: {args.values[0]!r}") from None
    if count < 1:
        raise ValueError("repeat's count must be >= 1")
    return count
