"""Top-level entry point: CachedImageResizer."""

from __future__ import annotations

import logging

from imagecache.cache.keys import request_cache_key
from imagecache.cache.store import ShardedCacheStore
from imagecache.config.schema import ImageCacheConfig
from imagecache.transform.client import ImageTransformer, ImgproxyTransformer
from imagecache.types import (
    CACHE_STATUS_HEADER,
    SERVER_HEADER,
    SERVER_NAME,
    TransformedImage,
    TransformRequest,
)

logger = logging.getLogger(__name__)

CACHE_HIT = "HIT"
CACHE_MISS = "MISS"
CACHE_BYPASS = "BYPASS"
CACHE_SKIP = "SKIP"


class CachedImageResizer:
    """Read-through cache in front of an image transformer.

    Looks the request fingerprint up in the store, and on a miss asks the
    transformer and stores successful results. The returned image carries an
    ``X-Cache`` header of HIT, MISS, BYPASS (cache disabled) or SKIP
    (upstream failure, not stored).
    """

    def __init__(
        self,
        store: ShardedCacheStore,
        transformer: ImageTransformer,
        enabled: bool = True,
    ) -> None:
        self._store = store
        self._transformer = transformer
        self._enabled = enabled

    @classmethod
    def from_config(cls, config: ImageCacheConfig) -> CachedImageResizer:
        """Build a resizer from resolved settings (see load_config_hierarchy)."""
        return cls(
            store=ShardedCacheStore(config.cache_dir),
            transformer=ImgproxyTransformer(
                config.imgproxy_url, timeout=config.transform_timeout
            ),
            enabled=config.cache_enabled,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def store(self) -> ShardedCacheStore:
        return self._store

    async def resize(self, request: TransformRequest) -> TransformedImage:
        key = request_cache_key(request)

        if self._enabled:
            entry = await self._store.get(key)
            if entry is not None:
                logger.debug("Cache hit for %s", request.src)
                image = TransformedImage.from_entry(entry)
                _set_header(image.headers, SERVER_HEADER, SERVER_NAME)
                _set_header(image.headers, CACHE_STATUS_HEADER, CACHE_HIT)
                return image

        image = await self._transformer.transform(request)
        _set_header(image.headers, SERVER_HEADER, SERVER_NAME)

        if not image.ok:
            logger.info("Upstream returned %d for %s, not caching", image.status, request.src)
            status = CACHE_SKIP
        elif self._enabled:
            await self._store.put(key, image.to_entry())
            status = CACHE_MISS
        else:
            status = CACHE_BYPASS

        _set_header(image.headers, CACHE_STATUS_HEADER, status)
        return image

    async def close(self) -> None:
        aclose = getattr(self._transformer, "aclose", None)
        if aclose is not None:
            await aclose()


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set a header, replacing any existing one regardless of case."""
    for existing in [k for k in headers if k.lower() == name.lower()]:
        del headers[existing]
    headers[name] = value
