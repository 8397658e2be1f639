"""Shared setup logic for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import yaml


def load_settings(config_file: str | None = None):
    """Engine settings from an optional file plus ZAKAT_ENGINE_* env vars."""
    from zakat_engine.core.config import Config

    return Config(config_file=config_file).validated()


def load_registry(config_file: str | None = None):
    """Registry from the packaged presets and any configured preset directories."""
    from zakat_engine.methodology.registry import build_registry, default_registry

    if config_file is None:
        return default_registry()
    settings = load_settings(config_file)
    return build_registry(settings.methodology.preset_dirs, settings.methodology.default)


def read_snapshot_file(path: str) -> dict[str, Any]:
    """Read a YAML or JSON snapshot file into a dict."""
    source = Path(path)
    text = source.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if source.suffix.lower() == ".json" else yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Could not parse snapshot file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.ClickException(f"Snapshot file {path} must contain a mapping of fields")
    return data


def load_snapshot(path: str, config_file: str | None = None, **overrides: Any):
    """Build a FinancialSnapshot from a file, applying CLI overrides and settings defaults."""
    from zakat_engine.models import FinancialSnapshot

    settings = load_settings(config_file)
    data = read_snapshot_file(path)
    data.setdefault("methodology", settings.methodology.default)
    data.update({key: value for key, value in overrides.items() if value is not None})
    return FinancialSnapshot.from_dict(
        data,
        default_age=settings.snapshot.default_age,
        default_tax_rate=settings.snapshot.default_tax_rate,
    )


def money(value: float) -> str:
    return f"{value:,.2f}"
