"""Pydantic models for cmdlets configuration validation."""

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Config(BaseModel):
    """Root configuration.

    Example config.json:
        {
            "exit_on_error": false,
            "module_dirs": ["%HOME%/cmdlets-modules"],
            "modules": {
                "hello": {"who": "world"}
            }
        }
    """

    model_config = ConfigDict(extra="forbid")

    exit_on_error: bool = True
    """Abort the whole run (exit status 1) at the first failed command."""

    show_hidden: bool = False
    """Include hidden (built-in) commands in menu listings."""

    module_dirs: list[str] = Field(default_factory=list)
    """Directories whose command modules are loaded at startup."""

    modules: dict[str, dict[str, Any]] = Field(default_factory=dict)
    """Per-module settings keyed by group name, handed to each module's setup()."""

    @field_validator("module_dirs")
    @classmethod
    def expand_module_dirs(cls, v: list[str]) -> list[str]:
        """Expand ~ and make module directories absolute."""
        return [os.path.abspath(os.path.expanduser(p)) for p in v]

    def module_config(self, group: str) -> dict[str, Any]:
        """Get the settings block for one module group (empty if absent)."""
        return self.modules.get(group, {})
