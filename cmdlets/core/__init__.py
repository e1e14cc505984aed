"""Core types, errors and constants."""

from cmdlets.core.errors import (
    CmdletsError,
    CommandFailed,
    ConfigError,
    EmptyCommandName,
    InitializationError,
    InvalidDescriptor,
    ModuleLoadError,
    ParseError,
    RunAborted,
    UnknownCommand,
    UnterminatedArgumentList,
)
from cmdlets.core.types import (
    NO_ARGS,
    ArgKind,
    ArgumentForm,
    Convention,
    Named,
    NoArgs,
    Outcome,
    Positional,
    as_argument_form,
)

__all__ = [
    # Errors
    "CmdletsError",
    "CommandFailed",
    "ConfigError",
    "EmptyCommandName",
    "InitializationError",
    "InvalidDescriptor",
    "ModuleLoadError",
    "ParseError",
    "RunAborted",
    "UnknownCommand",
    "UnterminatedArgumentList",
    # Types
    "ArgKind",
    "ArgumentForm",
    "Convention",
    "NO_ARGS",
    "Named",
    "NoArgs",
    "Outcome",
    "Positional",
    "as_argument_form",
]
