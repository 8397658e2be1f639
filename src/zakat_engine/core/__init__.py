"""Core plumbing — exceptions and engine settings."""

from .config import Config, get_config, reset_config
from .exceptions import ConfigurationError, SnapshotError, UnknownMethodologyError, ZakatEngineError

__all__ = [
    "Config",
    "ConfigurationError",
    "SnapshotError",
    "UnknownMethodologyError",
    "ZakatEngineError",
    "get_config",
    "reset_config",
]
