"""Exit-code constants used by the CLI layer."""

SUCCESS = 0
"""Every chain ran (failures are reported but tolerated without exit-on-error)."""

COMMAND_FAILED = 1
"""Exit-on-error tripped: a command, parse or initializer failed."""

USAGE_ERROR = 2
"""Bad config file or command module; nothing was run."""

KEYBOARD_INTERRUPT = 130
"""User pressed Ctrl+C (128 + SIGINT)."""
