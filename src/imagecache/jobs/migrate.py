"""Migration job — move legacy flat entries into their shard directories."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from imagecache.cache.sharding import SHARD_PREFIX_LENGTH, flat_path, is_shard_name, sharded_path
from imagecache.jobs.common import PROGRESS_INTERVAL, ProgressCallback, list_root_files
from imagecache.jobs.reports import MigrationReport

logger = logging.getLogger(__name__)


async def migrate_cache(
    cache_dir: str | Path,
    progress: ProgressCallback[MigrationReport] | None = None,
) -> MigrationReport:
    """Rename every flat file in the cache root to ``<shard>/<name>``.

    Idempotent: a file whose sharded target already exists is left where it
    is. Sidecars move on their own since they share their key's prefix.
    Raises CacheRootError if the root cannot be listed; per-file failures
    are counted and logged.
    """
    cache_dir = Path(cache_dir)
    names = await asyncio.to_thread(list_root_files, cache_dir)
    report = MigrationReport(total_files=len(names))
    logger.info("Migrating %d files in %s", len(names), cache_dir)

    for i, name in enumerate(names):
        if len(name) < SHARD_PREFIX_LENGTH:
            report.skipped_too_short += 1
        elif is_shard_name(name):
            report.skipped_shard_name += 1
        else:
            try:
                moved = await asyncio.to_thread(_move_to_shard, cache_dir, name)
            except OSError as e:
                report.errors += 1
                logger.error("Error moving file %s: %s", name, e)
            else:
                if moved:
                    report.moved += 1
                else:
                    report.skipped_already_exists += 1

        if progress and (i + 1) % PROGRESS_INTERVAL == 0:
            progress(i + 1, len(names), report)

    return report


def _move_to_shard(cache_dir: Path, name: str) -> bool:
    """Returns False when the sharded target already exists."""
    target = sharded_path(cache_dir, name)
    # A live writer may create the target between this check and the rename;
    # either way one complete file ends up there.
    if os.path.lexists(target):
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    os.rename(flat_path(cache_dir, name), target)
    return True
