"""Built-in command modules, loaded (and hidden) by Engine.load_builtins()."""

from cmdlets.command.builtin import sys_commands

BUILTIN_MODULES = (sys_commands,)

__all__ = ["BUILTIN_MODULES", "sys_commands"]
