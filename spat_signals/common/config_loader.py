"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from spat_signals.common.errors import ConfigError
from spat_signals.common.fs import read_yaml
from spat_signals.common.schema import validate_spat_config

CONFIG_FILENAME = "spat.yml"


@dataclass(frozen=True)
class ConfigBundle:
    upstream: dict
    metadata: dict
    nearby: dict


@dataclass(frozen=True)
class ApiKey:
    source: str
    value: str


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def load_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
    cfg = validate_spat_config(cfg, allow_unknown=allow_unknown)
    return ConfigBundle(upstream=cfg["upstream"], metadata=cfg["metadata"], nearby=cfg["nearby"])


def _key_source_label(index: int) -> str:
    if index == 0:
        return "primary"
    if index == 1:
        return "sub"
    return f"sub{index}"


def resolve_api_keys(env_names: list[str], environ: Mapping[str, str] | None = None) -> list[ApiKey]:
    """Read API keys from the environment in priority order, skipping blanks."""
    env = os.environ if environ is None else environ
    keys: list[ApiKey] = []
    for index, name in enumerate(env_names):
        value = (env.get(name) or "").strip()
        if value:
            keys.append(ApiKey(source=_key_source_label(index), value=value))
    return keys


def metadata_candidate_paths(bundle: ConfigBundle, base_dir: Path | None = None) -> list[Path]:
    data_dir = Path(bundle.metadata["data_dir"])
    if base_dir is not None and not data_dir.is_absolute():
        data_dir = base_dir / data_dir
    return [data_dir / name for name in bundle.metadata["candidates"]]
