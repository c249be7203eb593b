"""Sharded disk cache store with atomic per-file writes."""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from pathlib import Path

from imagecache.cache.codec import decode_entry, encode_metadata, metadata_path_name
from imagecache.cache.sharding import flat_path, sharded_path
from imagecache.types import CacheEntry

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class ShardedCacheStore:
    """Content-addressed store laid out as ``cache_dir/<key[:2]>/<key>``.

    Every failure on the read path is a miss and every failure on the write
    path is logged, so the cache never fails the request that uses it.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self._cache_dir = Path(cache_dir)
        self._root_ready = False

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, key: str) -> Path:
        """Canonical data file path for a key."""
        return sharded_path(self._cache_dir, key)

    async def ensure_root(self) -> None:
        """Create the cache root if needed. Safe to call any number of times."""
        if self._root_ready:
            return
        await asyncio.to_thread(self._cache_dir.mkdir, parents=True, exist_ok=True)
        self._root_ready = True

    async def get(self, key: str) -> CacheEntry | None:
        """Return the entry for a key, or None on any kind of miss.

        The sharded pair always wins. A legacy flat pair in the cache root
        is served only when the sharded pair is absent or unreadable.
        """
        try:
            await self.ensure_root()
        except OSError as e:
            logger.debug("Cache root unavailable for %s: %s", key, e)
            return None

        data_path = self.path_for(key)
        entry = await _read_pair(data_path, key)
        if entry is None:
            legacy_path = flat_path(self._cache_dir, key)
            if legacy_path != data_path:
                entry = await _read_pair(legacy_path, key)
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Write the data file and its sidecar.

        Both writes are always attempted; failures are logged, never raised.
        A half-written pair reads back as a miss.
        """
        data_path = self.path_for(key)
        meta_path = data_path.with_name(metadata_path_name(data_path.name))
        try:
            await self.ensure_root()
            await asyncio.to_thread(data_path.parent.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Failed to create shard directory for %s: %s", key, e)
            return

        results = await asyncio.gather(
            asyncio.to_thread(_write_atomic, data_path, entry.payload),
            asyncio.to_thread(_write_atomic, meta_path, encode_metadata(entry)),
            return_exceptions=True,
        )
        for path, result in zip((data_path, meta_path), results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Failed to write image cache file %s: %s", path, result)


def _write_atomic(path: Path, data: bytes) -> None:
    """Write to a unique temp file in the same directory, then rename over."""
    tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}{TEMP_SUFFIX}")
    try:
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


async def _read_pair(data_path: Path, key: str) -> CacheEntry | None:
    """Read a data file and its sidecar; both must exist and the sidecar must parse."""
    meta_path = data_path.with_name(metadata_path_name(data_path.name))
    try:
        payload, raw_meta = await asyncio.gather(
            asyncio.to_thread(data_path.read_bytes),
            asyncio.to_thread(meta_path.read_bytes),
        )
        return decode_entry(payload, raw_meta)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.debug("Treating unreadable cache entry %s at %s as a miss: %s", key, data_path, e)
        return None
