"""Cleanup job — delete flat entries that already have a sharded copy."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from imagecache.cache.codec import data_name_for, is_metadata_name, metadata_path_name
from imagecache.cache.sharding import SHARD_PREFIX_LENGTH, flat_path, is_shard_name, sharded_path
from imagecache.jobs.common import PROGRESS_INTERVAL, ProgressCallback, list_root_files
from imagecache.jobs.reports import CleanupReport

logger = logging.getLogger(__name__)


async def cleanup_duplicates(
    cache_dir: str | Path,
    progress: ProgressCallback[CleanupReport] | None = None,
) -> CleanupReport:
    """Remove flat files from the cache root whose sharded data file exists.

    Flat files without a sharded counterpart are kept so that entries that
    were never migrated stay on disk. A sidecar is removed together with its
    data file; a flat sidecar with no flat data file is judged on its own.
    """
    cache_dir = Path(cache_dir)
    names = await asyncio.to_thread(list_root_files, cache_dir)
    present = set(names)
    report = CleanupReport(total_files=len(names))
    logger.info("Checking %d files in %s for sharded duplicates", len(names), cache_dir)

    for i, name in enumerate(names):
        if len(name) < SHARD_PREFIX_LENGTH or is_shard_name(name):
            report.kept += 1
        elif is_metadata_name(name) and data_name_for(name) in present:
            pass  # handled with its data file
        else:
            key = data_name_for(name) if is_metadata_name(name) else name
            try:
                freed = await asyncio.to_thread(_remove_duplicate, cache_dir, name, key)
            except OSError as e:
                report.errors += 1
                logger.error("Error processing file %s: %s", name, e)
            else:
                if freed is None:
                    report.kept += 1
                else:
                    report.deleted += 1
                    report.bytes_freed += freed

        if progress and (i + 1) % PROGRESS_INTERVAL == 0:
            progress(i + 1, len(names), report)

    return report


def _remove_duplicate(cache_dir: Path, name: str, key: str) -> int | None:
    """Delete ``cache_dir/name`` if the sharded data file for ``key`` exists.

    Returns the number of bytes freed, or None if the file was kept.
    """
    if not os.path.lexists(sharded_path(cache_dir, key)):
        return None

    flat = flat_path(cache_dir, name)
    freed = flat.stat().st_size
    flat.unlink()

    if name == key:
        sidecar = flat_path(cache_dir, metadata_path_name(name))
        try:
            size = sidecar.stat().st_size
            sidecar.unlink()
            freed += size
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove sidecar %s: %s", sidecar.name, e)
    return freed
