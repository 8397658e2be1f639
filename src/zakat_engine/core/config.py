"""
Hierarchical engine settings.

Loads settings from multiple sources with this precedence (highest wins):
    1. Environment variables (PREFIX_SECTION__KEY)
    2. Settings file (YAML or JSON)
    3. Built-in defaults

Settings only steer how the engine is wired (which methodology is the
default, where extra methodology presets live, snapshot defaults). They never
change the rules of a methodology; those live in the methodology presets.

Usage:
    config = Config()
    config = Config(config_file="zakat.yaml", env_prefix="MYAPP_")

    config.get("methodology.default")      # dot-notation access
    config.validated().methodology.preset_dirs
"""

import json
import os
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigurationError

_DEFAULT_ENV_PREFIX = "ZAKAT_ENGINE_"

# Keys whose env-var value is a path list separated by os.pathsep
_PATH_LIST_KEYS = {("methodology", "preset_dirs")}


class Config:
    """
    Central settings manager.

    Loads and merges settings from defaults, a settings file, and
    environment variables. Env vars use double-underscore to denote nesting:
    ZAKAT_ENGINE_METHODOLOGY__DEFAULT=hanafi -> config["methodology"]["default"] = "hanafi"
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: Path to YAML or JSON settings file.
            env_prefix: Prefix for environment variable overrides.
            defaults: Additional default values to merge (consumer-specific).
        """
        self.config_file = config_file
        self.env_prefix = env_prefix or ""
        self._extra_defaults = defaults or {}
        self.config_data: dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """Load settings from all sources."""
        self.config_data = self._get_default_config()

        if self._extra_defaults:
            self._update_dict(self.config_data, self._extra_defaults)

        if self.config_file and os.path.exists(self.config_file):
            file_config = self._load_file(self.config_file)
            self._update_dict(self.config_data, file_config)

        # Env vars override everything
        self._load_from_env()

    def _get_default_config(self) -> dict[str, Any]:
        return {
            "methodology": {
                "default": "bradford",
                "preset_dirs": [],
            },
            "snapshot": {
                "default_age": 30,
                "default_tax_rate": 0.25,
            },
        }

    @staticmethod
    def _load_file(path: str) -> dict[str, Any]:
        """Load a YAML or JSON settings file."""
        ext = os.path.splitext(path)[1].lower()
        try:
            with open(path) as f:
                if ext in (".yaml", ".yml"):
                    return yaml.safe_load(f) or {}
                elif ext == ".json":
                    return json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not parse settings file {path}: {e}") from e
        return {}

    def _update_dict(self, target: dict, source: dict) -> None:
        """Recursively merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _load_from_env(self) -> None:
        """Override settings from environment variables."""
        if not self.env_prefix:
            return
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.env_prefix):
                continue
            config_key = env_key[len(self.env_prefix) :].lower()
            key_parts = config_key.split("__")

            value: Any = env_value
            if tuple(key_parts) in _PATH_LIST_KEYS:
                value = [p for p in env_value.split(os.pathsep) if p]

            current = self.config_data
            for part in key_parts[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]
            current[key_parts[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a settings value by dot-notation path.

        Args:
            key_path: e.g. "methodology.default", "snapshot.default_tax_rate"
            default: Returned when key is not found.
        """
        parts = key_path.split(".")
        current = self.config_data
        for part in parts:
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        """Set a settings value by dot-notation path, creating intermediate dicts."""
        parts = key_path.split(".")
        current = self.config_data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def validated(self):
        """Return the settings as a typed ``EngineSettings`` model.

        Raises:
            ConfigurationError: If any value fails validation.
        """
        from .config_schema import EngineSettings

        try:
            return EngineSettings.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid engine settings: {e}") from e


# Module-level singleton
_config_instance: Config | None = None


def get_config(
    config_file: str | None = None,
    env_prefix: str = _DEFAULT_ENV_PREFIX,
) -> Config:
    """Get or create the global Config singleton."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_file=config_file, env_prefix=env_prefix)
    return _config_instance


def reset_config() -> None:
    """Reset the global Config singleton (useful for testing)."""
    global _config_instance
    _config_instance = None
