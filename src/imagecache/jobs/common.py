"""Helpers shared by the batch jobs."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from imagecache.errors.exceptions import CacheRootError

R = TypeVar("R")

# Called with (processed, total, report-so-far)
ProgressCallback = Callable[[int, int, R], None]

PROGRESS_INTERVAL = 100


def list_root_files(cache_dir: Path) -> list[str]:
    """Names of the regular files directly under the cache root.

    Shard directories are not regular files and never appear here.
    Raises CacheRootError when the root cannot be listed.
    """
    try:
        with os.scandir(cache_dir) as it:
            return sorted(entry.name for entry in it if entry.is_file(follow_symlinks=False))
    except OSError as e:
        raise CacheRootError(cache_dir, e) from e
