"""Core constants and paths for cmdlets.

Single source of truth for delimiters, environment variable names and
global paths.
"""

from pathlib import Path

CMDLETS_DIR_NAME = ".cmdlets"
CONFIG_FILE_NAME = "config.json"

# Cascade: "cmd1 * cmd2 * cmd3"
CASCADE_DELIMITER = "*"

# Argument list delimiters, in priority order: fn(...) then fn[...]
ARG_DELIMITERS: tuple[tuple[str, str], ...] = (("(", ")"), ("[", "]"))

# Truthy number (e.g. 1) shows hidden commands in the menu
SHOW_HIDDEN_ENV = "SHOW_HIDDEN_CMD"

# Group the built-in commands are registered under
BUILTIN_GROUP = "sys"

# Module entry point name looked up on every command module
MODULE_ENTRY_POINT = "setup"


def get_cmdlets_dir() -> Path:
    """Get ~/.cmdlets (global config directory)."""
    return Path.home() / CMDLETS_DIR_NAME
