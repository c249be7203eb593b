"""Configuration hierarchy: merges sources in priority order.

Precedence (later overrides earlier):
  1. Defaults on ImageCacheConfig
  2. Global config   (~/.imagecache/config.yaml)
  3. Project config   (./imagecache.yaml, searched from cwd upward)
  4. Environment variables (CACHE_DIR, CACHE_ENABLED, IMGPROXY_URL, IMAGECACHE_*)
  5. Runtime arguments

Every layer is validated against ImageCacheConfig. A value that does not
validate is logged and dropped, so the next lower layer (or the default)
applies instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from imagecache.config.schema import ImageCacheConfig

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".imagecache" / "config.yaml"
_PROJECT_CONFIG_NAME = "imagecache.yaml"

_ENV_MAP: dict[str, str] = {
    "CACHE_DIR": "cache_dir",
    "CACHE_ENABLED": "cache_enabled",
    "IMGPROXY_URL": "imgproxy_url",
    "IMAGECACHE_TRANSFORM_TIMEOUT": "transform_timeout",
    "IMAGECACHE_SCAN_WORKERS": "scan_workers",
}

# Only an explicit "off" value disables the cache
_FALSY = {"0", "false", "no", "off"}


def load_config_hierarchy(**runtime_overrides: Any) -> ImageCacheConfig:
    """Load, merge and validate configuration from all sources."""
    layers: list[tuple[str, dict[str, Any]]] = [
        (str(_GLOBAL_CONFIG_PATH), _load_yaml_config(_GLOBAL_CONFIG_PATH) or {}),
    ]
    project_path = _find_project_config()
    if project_path:
        layers.append((str(project_path), _load_yaml_config(project_path) or {}))
    layers.append(("environment", _load_env_vars()))
    layers.append(
        ("runtime", {k: v for k, v in runtime_overrides.items() if v is not None})
    )

    merged: dict[str, Any] = {}
    for source, values in layers:
        merged.update(_valid_values(source, values))
    return ImageCacheConfig.model_validate(merged)


def _valid_values(source: str, values: dict[str, Any]) -> dict[str, Any]:
    """Keep only the known keys of one layer whose values validate."""
    known = {k: v for k, v in values.items() if k in ImageCacheConfig.model_fields}
    try:
        ImageCacheConfig.model_validate(known)
    except ValidationError as e:
        for error in e.errors():
            key = error["loc"][0] if error["loc"] else None
            if key in known:
                logger.warning(
                    "Ignoring invalid %s=%r from %s: %s", key, known.pop(key), source, error["msg"]
                )
    return known


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None
    return data


def _find_project_config() -> Path | None:
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        if config_key == "cache_enabled":
            result[config_key] = value.strip().lower() not in _FALSY
        else:
            result[config_key] = value
    return result
