"""
Methodology registry — load, validate and look up methodology presets.

Presets are YAML files, one methodology per file; the file stem is the
registry key (``hanafi.yaml`` -> ``hanafi``) and ``meta.id`` is accepted as
an alias.  Every file is validated when it is loaded, so a malformed preset
fails at startup rather than in the middle of a calculation.

The registry is read-only once constructed and can be shared freely between
threads.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType

import yaml
from loguru import logger
from pydantic import ValidationError

from ..core.config import get_config
from ..core.exceptions import ConfigurationError, UnknownMethodologyError
from .schema import MethodologyConfig

DEFAULT_METHODOLOGY = "bradford"
PRESET_SUFFIXES = (".yaml", ".yml")


def normalize_id(methodology_id: str) -> str:
    """Lookup key for a methodology id: case, surrounding space and separators ignored."""
    return "_".join(methodology_id.strip().lower().replace("-", " ").split())


@dataclass(frozen=True)
class MethodologyResolution:
    """Outcome of a lenient lookup.

    ``used_default`` is True when ``requested`` matched nothing and the
    registry's default methodology was substituted.
    """

    key: str
    config: MethodologyConfig
    used_default: bool
    requested: str | None = None


def parse_methodology(text: str, source: str) -> MethodologyConfig:
    """Parse and validate one methodology document.

    Raises:
        ConfigurationError: If the document is not valid YAML or fails validation.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse methodology {source}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Methodology {source} must be a mapping, got {type(data).__name__}")
    try:
        return MethodologyConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid methodology {source}: {e}") from e


def _packaged_presets():
    return resources.files(__package__) / "presets"


def load_presets(directory: str | Path | None = None) -> dict[str, MethodologyConfig]:
    """Load every preset in ``directory`` (the packaged presets by default).

    Returns:
        Mapping of file stem to validated config, in file-name order.
    """
    root = _packaged_presets() if directory is None else Path(directory).expanduser()
    if directory is not None and not root.is_dir():
        raise ConfigurationError(f"Methodology preset directory not found: {root}")

    presets: dict[str, MethodologyConfig] = {}
    for entry in sorted(root.iterdir(), key=lambda e: e.name):
        stem, dot, suffix = entry.name.rpartition(".")
        if not dot or f".{suffix.lower()}" not in PRESET_SUFFIXES:
            continue
        presets[normalize_id(stem)] = parse_methodology(entry.read_text(encoding="utf-8"), entry.name)

    logger.debug(f"Loaded {len(presets)} methodology presets from {root}")
    return presets


class MethodologyRegistry:
    """Immutable set of named methodologies with a default.

    Lookups are case and separator insensitive and also accept each
    methodology's ``meta.id`` (e.g. ``hanafi-standard``).
    """

    def __init__(self, configs: Mapping[str, MethodologyConfig], default_id: str = DEFAULT_METHODOLOGY):
        if not configs:
            raise ConfigurationError("A methodology registry needs at least one methodology")

        normalized = {normalize_id(key): config for key, config in configs.items()}
        self._configs: Mapping[str, MethodologyConfig] = MappingProxyType(normalized)

        aliases: dict[str, str] = {}
        for key, config in normalized.items():
            aliases.setdefault(normalize_id(config.meta.id), key)
        self._aliases: Mapping[str, str] = MappingProxyType(aliases)

        default_key = self._lookup(default_id)
        if default_key is None:
            raise ConfigurationError(
                f"Default methodology '{default_id}' is not registered. Available: {', '.join(self.ids())}"
            )
        self._default_key = default_key

    def _lookup(self, methodology_id: str | None) -> str | None:
        if not methodology_id:
            return None
        key = normalize_id(methodology_id)
        if key in self._configs:
            return key
        return self._aliases.get(key)

    @property
    def default_id(self) -> str:
        return self._default_key

    @property
    def default(self) -> MethodologyConfig:
        return self._configs[self._default_key]

    def ids(self) -> list[str]:
        return list(self._configs)

    def get(self, methodology_id: str) -> MethodologyConfig:
        """Strict lookup.

        Raises:
            UnknownMethodologyError: If no methodology matches.
        """
        key = self._lookup(methodology_id)
        if key is None:
            raise UnknownMethodologyError(methodology_id, available=self.ids())
        return self._configs[key]

    def resolve(self, methodology_id: str | None) -> MethodologyResolution:
        """Lenient lookup: unknown or empty ids resolve to the default methodology."""
        key = self._lookup(methodology_id)
        if key is not None:
            return MethodologyResolution(key=key, config=self._configs[key], used_default=False, requested=methodology_id)

        logger.warning(f"Unknown methodology '{methodology_id}', falling back to default '{self._default_key}'")
        return MethodologyResolution(
            key=self._default_key,
            config=self._configs[self._default_key],
            used_default=True,
            requested=methodology_id,
        )

    def items(self) -> Iterable[tuple[str, MethodologyConfig]]:
        return self._configs.items()

    def __contains__(self, methodology_id: object) -> bool:
        return isinstance(methodology_id, str) and self._lookup(methodology_id) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def __repr__(self) -> str:
        return f"MethodologyRegistry({', '.join(self.ids())}, default={self._default_key!r})"


# Module-level singleton, built once on first use
_registry_lock = threading.Lock()
_default_registry: MethodologyRegistry | None = None


def build_registry(
    preset_dirs: Iterable[str | Path] = (),
    default_id: str = DEFAULT_METHODOLOGY,
) -> MethodologyRegistry:
    """Packaged presets plus any extra directories; later directories override earlier keys."""
    configs = load_presets()
    for directory in preset_dirs:
        extra = load_presets(directory)
        overridden = sorted(set(extra) & set(configs))
        if overridden:
            logger.info(f"Presets in {directory} override: {', '.join(overridden)}")
        configs.update(extra)

    registry = MethodologyRegistry(configs, default_id=default_id)
    logger.info(f"Methodology registry ready: {len(registry)} methodologies, default '{registry.default_id}'")
    return registry


def default_registry() -> MethodologyRegistry:
    """Process-wide registry built from packaged presets and engine settings."""
    global _default_registry
    if _default_registry is not None:
        return _default_registry
    with _registry_lock:
        if _default_registry is None:
            settings = get_config().validated()
            _default_registry = build_registry(
                preset_dirs=settings.methodology.preset_dirs,
                default_id=settings.methodology.default,
            )
    return _default_registry


def reset_default_registry() -> None:
    """Drop the cached registry (useful for testing)."""
    global _default_registry
    with _registry_lock:
        _default_registry = None
