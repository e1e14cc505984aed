"""Command registry, invocation parser, execution adapter and cascade scheduler.

Architecture:
    - registry.py: CommandSpec and CommandRegistry
    - parser.py: token grammar -> Invocation
    - adapter.py: sync / callback / awaitable -> Outcome
    - chain.py: Invocation, ChainContext, current_step()
    - scheduler.py: cascade chains, fail-fast, exit-on-error
    - modules.py: module loading with explicit groups
    - engine.py: the facade tying it together

Example:
    from cmdlets.command import Engine

    engine = Engine.create()
    engine.register("add", lambda a, b: int(a) + int(b), group="math")
    results = await engine.run(["add(2,3)"])
"""

from cmdlets.command.adapter import ExecutionAdapter
from cmdlets.command.chain import (
    ChainContext,
    ChainResult,
    ChainState,
    Invocation,
    current_step,
)
from cmdlets.command.engine import Engine
from cmdlets.command.error_log import ErrorLog
from cmdlets.command.modules import (
    ModuleRegistrar,
    load_module,
    load_module_dir,
    load_module_file,
)
from cmdlets.command.parser import (
    parse_arguments,
    parse_chain,
    parse_invocation,
    split_call,
    split_chain,
)
from cmdlets.command.registry import CommandRegistry, CommandSpec
from cmdlets.command.scheduler import CascadeScheduler

__all__ = [
    # Registry
    "CommandRegistry",
    "CommandSpec",
    # Parser
    "parse_arguments",
    "parse_chain",
    "parse_invocation",
    "split_call",
    "split_chain",
    # Execution
    "CascadeScheduler",
    "ChainContext",
    "ChainResult",
    "ChainState",
    "Engine",
    "ErrorLog",
    "ExecutionAdapter",
    "Invocation",
    "current_step",
    # Modules
    "ModuleRegistrar",
    "load_module",
    "load_module_dir",
    "load_module_file",
]
