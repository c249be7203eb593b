"""Typed configuration model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from imagecache.config.defaults import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_ENABLED,
    DEFAULT_IMGPROXY_URL,
    DEFAULT_SCAN_WORKERS,
    DEFAULT_TRANSFORM_TIMEOUT,
)


class ImageCacheConfig(BaseModel):
    """Resolved settings for the store, the resizer and the batch jobs.

    Unknown keys in config files are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    cache_enabled: bool = DEFAULT_CACHE_ENABLED
    imgproxy_url: str = DEFAULT_IMGPROXY_URL
    transform_timeout: float = Field(default=DEFAULT_TRANSFORM_TIMEOUT, gt=0)
    scan_workers: int = Field(default=DEFAULT_SCAN_WORKERS, ge=1)
