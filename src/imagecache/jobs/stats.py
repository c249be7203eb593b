"""Statistics job — read-only census of the root and all shard directories."""

from __future__ import annotations

import asyncio
import logging
import os
import statistics
from pathlib import Path

from imagecache.cache.codec import data_name_for, decode_metadata, is_metadata_name
from imagecache.cache.sharding import SHARD_COUNT, SHARD_NAMES
from imagecache.cache.store import TEMP_SUFFIX
from imagecache.config.defaults import DEFAULT_SCAN_WORKERS
from imagecache.errors.exceptions import CacheRootError
from imagecache.jobs.reports import CacheStatistics, DirectoryStats, ShardDistribution

logger = logging.getLogger(__name__)

_TOP_SHARDS = 10
ROOT_NAME = "."


async def collect_statistics(
    cache_dir: str | Path,
    scan_workers: int = DEFAULT_SCAN_WORKERS,
) -> CacheStatistics:
    """Scan the cache root and every shard directory without modifying anything.

    Missing or unreadable shard directories count as empty. An unreadable
    root raises CacheRootError.
    """
    cache_dir = Path(cache_dir)
    root = await asyncio.to_thread(scan_directory, cache_dir, ROOT_NAME, True)

    semaphore = asyncio.Semaphore(max(1, scan_workers))

    async def scan_shard(shard: str) -> DirectoryStats:
        async with semaphore:
            return await asyncio.to_thread(scan_directory, cache_dir / shard, shard)

    shards = await asyncio.gather(*(scan_shard(s) for s in SHARD_NAMES))
    return summarize(cache_dir, root, list(shards))


def scan_directory(path: Path, name: str, required: bool = False) -> DirectoryStats:
    """Classify every entry in one directory.

    Pass one resolves sidecars to their data files and sorts the pairs into
    normal and transparent by the stored flag. Pass two counts the data
    files left over as uncategorized.
    """
    result = DirectoryStats(name=name)
    try:
        with os.scandir(path) as it:
            files = {e.name: e for e in it if e.is_file(follow_symlinks=False)}
    except OSError as e:
        if required:
            raise CacheRootError(path, e) from e
        if not isinstance(e, FileNotFoundError):
            logger.warning("Skipping unreadable shard directory %s: %s", path, e)
        return result

    resolved: set[str] = set()
    for file_name, entry in files.items():
        if not is_metadata_name(file_name):
            continue
        try:
            result.metadata_bytes += entry.stat(follow_symlinks=False).st_size
        except OSError as e:
            logger.debug("Cannot stat %s: %s", entry.path, e)
            continue

        data_name = data_name_for(file_name)
        data_entry = files.get(data_name)
        if data_entry is None:
            continue
        try:
            size = data_entry.stat(follow_symlinks=False).st_size
            if size == 0:
                resolved.add(data_name)
                continue
            meta = decode_metadata(Path(entry.path).read_bytes())
        except (OSError, ValueError) as e:
            logger.debug("Unusable metadata %s: %s", entry.path, e)
            continue

        resolved.add(data_name)
        if meta.is_transparent:
            result.transparent_images.add(size)
        else:
            result.normal_images.add(size)

    for file_name, entry in files.items():
        if is_metadata_name(file_name) or file_name in resolved or file_name.endswith(TEMP_SUFFIX):
            continue
        try:
            result.uncategorized.add(entry.stat(follow_symlinks=False).st_size)
        except OSError as e:
            logger.debug("Cannot stat %s: %s", entry.path, e)

    return result


def summarize(
    cache_dir: Path, root: DirectoryStats, shards: list[DirectoryStats]
) -> CacheStatistics:
    """Fold per-directory results into one CacheStatistics."""
    totals = CacheStatistics(cache_dir=str(cache_dir))
    for d in [root, *shards]:
        for category in ("normal_images", "transparent_images", "uncategorized"):
            ours = getattr(totals, category)
            theirs = getattr(d, category)
            ours.count += theirs.count
            ours.bytes += theirs.bytes
        totals.metadata_bytes += d.metadata_bytes
    totals.entries = (
        totals.normal_images.count + totals.transparent_images.count + totals.uncategorized.count
    )
    totals.image_bytes = (
        totals.normal_images.bytes + totals.transparent_images.bytes + totals.uncategorized.bytes
    )

    occupied = [s for s in shards if s.entries > 0]
    counts = [s.entries for s in occupied]
    if counts:
        totals.shards = ShardDistribution(
            non_empty=len(counts),
            empty=SHARD_COUNT - len(counts),
            min_entries=min(counts),
            max_entries=max(counts),
            mean_entries=statistics.mean(counts),
            median_entries=statistics.median(counts),
        )
    else:
        totals.shards = ShardDistribution(empty=SHARD_COUNT)

    totals.busiest_shards = sorted(occupied, key=lambda s: (-s.entries, s.name))[:_TOP_SHARDS]
    totals.quietest_shards = sorted(occupied, key=lambda s: (s.entries, s.name))[:_TOP_SHARDS]
    return totals
