"""Configuration loading and validation."""

from cmdlets.config.loader import load_config
from cmdlets.config.schema import Config

__all__ = [
    "Config",
    "load_config",
]
