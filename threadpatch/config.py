"""Configuration models and loading for threadpatch."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from threadpatch.models import PatchRegionType, ThemeMode

CONFIG_FILENAME = ".threadpatch.yaml"


class AggregateConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    region_types: list[PatchRegionType] = Field(
        default_factory=lambda: [PatchRegionType.DIFF, PatchRegionType.BINARY_PATCH]
    )
    max_total_chars: int | None = 2_000_000
    max_total_lines: int | None = 50_000


class HighlightConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_lines: int = 12_000
    max_total_chars: int = 1_200_000
    default_theme: ThemeMode = ThemeMode.LIGHT


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    port: int = 8765
    max_request_patches: int = 500


class ThreadPatchConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    aggregate: AggregateConfig = Field(default_factory=AggregateConfig)
    highlight: HighlightConfig = Field(default_factory=HighlightConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"YAML at {path} must decode to a mapping")
    return data or {}


def load_effective_config(
    project_path: str | Path,
    org_defaults: dict[str, Any] | None = None,
    system_defaults: dict[str, Any] | None = None,
    runtime_override: dict[str, Any] | None = None,
) -> ThreadPatchConfig:
    """Load config with precedence runtime > project .threadpatch.yaml > org > system."""
    project_config = _load_yaml(Path(project_path) / CONFIG_FILENAME)

    merged: dict[str, Any] = {}
    for layer in (system_defaults, org_defaults, project_config, runtime_override):
        if layer:
            merged = _deep_merge(merged, layer)

    return ThreadPatchConfig.model_validate(merged)
