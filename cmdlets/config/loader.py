"""Configuration loading with fail-fast behavior and layered merging.

Layers, later overriding earlier via deep merge:
1. Global user config (~/.cmdlets/config.json)
2. Project local config (cwd/.cmdlets/config.json)

``%VAR%`` references in string values are substituted from the
environment after merging.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cmdlets.config.schema import Config
from cmdlets.core.constants import CMDLETS_DIR_NAME, CONFIG_FILE_NAME, get_cmdlets_dir
from cmdlets.core.errors import ConfigError
from cmdlets.core.utils import deep_merge, substitute_env_vars

logger = logging.getLogger(__name__)


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading
            and the file must exist.
        cwd: Working directory for local lookup. Defaults to Path.cwd().

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If any config file contains invalid JSON or merged config
            fails validation.
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"config: File not found: {path}")
        return _validate(read_config_layer(path), [path])

    effective_cwd = cwd or Path.cwd()
    merged: dict[str, Any] = {}
    loaded_from: list[Path] = []

    layers = [
        get_cmdlets_dir() / CONFIG_FILE_NAME,
        effective_cwd / CMDLETS_DIR_NAME / CONFIG_FILE_NAME,
    ]
    for layer in layers:
        if loaded_from and layer.resolve() == loaded_from[-1].resolve():
            # cwd is home: the global file is also the local one
            continue
        if not layer.is_file():
            logger.debug("No config layer at %s", layer)
            continue
        data = read_config_layer(layer)
        if data:
            merged = deep_merge(merged, data)
            loaded_from.append(layer)

    if not merged:
        logger.debug("No config files found, using defaults")
        return Config()

    return _validate(merged, loaded_from)


def read_config_layer(path: Path) -> dict[str, Any]:
    """Decode one config file. An empty file is an empty layer.

    A UTF-8 byte-order mark is accepted (some Windows editors write one).

    Raises:
        ConfigError: Unreadable file, malformed JSON, or a top level that
            is not an object.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"config: Failed to read file {path}: {e}") from e
    if not text.strip():
        return {}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"config: Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(
            f"config: {path} must hold a JSON object, got {type(data).__name__}"
        )
    return data


def _validate(data: dict[str, Any], sources: list[Path]) -> Config:
    logger.info("Config loaded from: %s", [str(p) for p in sources])
    try:
        return Config.model_validate(substitute_env_vars(data))
    except ValidationError as e:
        raise ConfigError(f"Config validation failed ({sources[-1]}): {e}") from e
