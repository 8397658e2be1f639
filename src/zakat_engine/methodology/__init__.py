"""Methodology rulesets — schema, packaged presets and the registry."""

from .registry import (
    DEFAULT_METHODOLOGY,
    MethodologyRegistry,
    MethodologyResolution,
    build_registry,
    default_registry,
    load_presets,
    parse_methodology,
    reset_default_registry,
)
from .schema import MethodologyConfig

__all__ = [
    "DEFAULT_METHODOLOGY",
    "MethodologyConfig",
    "MethodologyRegistry",
    "MethodologyResolution",
    "build_registry",
    "default_registry",
    "load_presets",
    "parse_methodology",
    "reset_default_registry",
]
