"""Shared utility functions for cmdlets.

These are common operations used across multiple modules that don't
fit into more specific categories.
"""

import logging
import os
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"%([A-Za-z_][A-Za-z0-9_]*)%")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``override`` on ``base`` and return a new dict.

    Nested dicts merge key by key, so a local config can change one module
    setting without restating the others. Anything else, lists included,
    is replaced wholesale: a local ``module_dirs`` fully supersedes the
    global one. Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def substitute_env_vars(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Replace ``%NAME%`` references in every string of a JSON-like value.

    Unknown variables are left verbatim.

    Args:
        value: A str, list, dict, or scalar loaded from JSON.
        environ: Variable source. Defaults to os.environ.

    Returns:
        A new value with substitutions applied; non-string scalars unchanged.
    """
    env = os.environ if environ is None else environ

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in env:
            return env[name]
        logger.warning("Environment variable not set: %%%s%%", name)
        return match.group(0)

    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(replace, value)
    if isinstance(value, list):
        return [substitute_env_vars(item, env) for item in value]
    if isinstance(value, dict):
        return {key: substitute_env_vars(item, env) for key, item in value.items()}
    return value


def env_flag(value: str | None) -> bool:
    """Interpret a numeric environment value as a boolean.

    "1", "2", "0.5" are true; "0", "", non-numeric text and None are false.
    """
    if not value:
        return False
    try:
        return float(value.strip()) != 0
    except ValueError:
        return False
