"""Batch jobs that operate on the on-disk cache layout."""

from imagecache.jobs.cleanup import cleanup_duplicates
from imagecache.jobs.migrate import migrate_cache
from imagecache.jobs.reports import CacheStatistics, CleanupReport, MigrationReport
from imagecache.jobs.stats import collect_statistics

__all__ = [
    "CacheStatistics",
    "CleanupReport",
    "MigrationReport",
    "cleanup_duplicates",
    "collect_statistics",
    "migrate_cache",
]
