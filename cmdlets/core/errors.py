"""Typed exception hierarchy for cmdlets."""

from __future__ import annotations


class CmdletsError(Exception):
    """Base class for all cmdlets errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(CmdletsError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class ModuleLoadError(CmdletsError):
    """Raised when a command module cannot be imported or has no setup() entry point."""


class InvalidDescriptor(CmdletsError):
    """Raised when a command is registered without a name or implementation."""


# === Parse errors ===


class ParseError(CmdletsError):
    """Base class for invocation grammar errors.

    Attributes:
        command_name: Name the error is recorded under in the error log.
        token: The chain element that failed to parse.
    """

    def __init__(self, message: str, command_name: str, token: str) -> None:
        self.command_name = command_name
        self.token = token
        super().__init__(message)


class UnterminatedArgumentList(ParseError):
    """The argument list's closing delimiter is not the token's last character."""

    def __init__(self, token: str, command_name: str, closer: str) -> None:
        self.closer = closer
        super().__init__(
            f'parameter parsing error: no ending "{closer}" in "{token}"',
            command_name,
            token,
        )


class EmptyCommandName(ParseError):
    """The token starts with an argument list and names no command."""

    def __init__(self, token: str) -> None:
        super().__init__(f"cmdlet name is empty: {token!r}", token, token)


class UnknownCommand(ParseError):
    """No command is registered under the requested name."""

    def __init__(self, name: str, token: str | None = None) -> None:
        super().__init__(f"Invalid command: {name}", name, token or name)


# === Execution errors ===


class InitializationError(CmdletsError):
    """A command's chain initializer raised before the chain started."""

    def __init__(self, command_name: str, cause: BaseException) -> None:
        self.command_name = command_name
        self.cause = cause
        super().__init__(f"{command_name}: initialization failed: {cause}")


class CommandFailed(CmdletsError):
    """A command implementation reported or raised an error."""

    def __init__(self, command_name: str, cause: BaseException) -> None:
        self.command_name = command_name
        self.cause = cause
        super().__init__(f"{command_name}: {cause}")


class RunAborted(CmdletsError):
    """Exit-on-error tripped; the run was abandoned at the first failure.

    Attributes:
        failure: The error that triggered the abort.
        exit_code: Process exit status the CLI should use.
    """

    def __init__(self, failure: CmdletsError, exit_code: int = 1) -> None:
        self.failure = failure
        self.exit_code = exit_code
        super().__init__(f"run aborted: {failure.message}")
