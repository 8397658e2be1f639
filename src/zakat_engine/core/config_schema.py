"""Pydantic models for engine settings validation.

Call ``Config.validated()`` to obtain a typed, validated ``EngineSettings``
instance.  Dict-based access through ``Config.get()`` keeps working unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MethodologySettings(BaseModel):
    """Which methodology is the default and where extra presets live."""

    default: str = "bradford"
    preset_dirs: list[Path] = []

    @field_validator("default")
    @classmethod
    def _normalize_default(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("default methodology id cannot be empty")
        return v

    @field_validator("preset_dirs", mode="before")
    @classmethod
    def _expand_dirs(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list):
            return [Path(p).expanduser() if isinstance(p, str | Path) else p for p in v]
        return v


class SnapshotSettings(BaseModel):
    """Defaults applied to snapshot fields the caller leaves out."""

    default_age: float = Field(30, ge=0)
    default_tax_rate: float = Field(0.25, ge=0, le=1)


class EngineSettings(BaseModel):
    """Root settings model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    methodology: MethodologySettings = MethodologySettings()
    snapshot: SnapshotSettings = SnapshotSettings()
