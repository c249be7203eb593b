"""Report models returned by the batch jobs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

_BYTES_PER_MB = 1024 * 1024


class _Report(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MigrationReport(_Report):
    """Counters from one migration pass."""

    total_files: int = 0
    moved: int = 0
    skipped_too_short: int = 0
    skipped_shard_name: int = 0
    skipped_already_exists: int = 0
    errors: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def skipped(self) -> int:
        return self.skipped_too_short + self.skipped_shard_name + self.skipped_already_exists


class CleanupReport(_Report):
    """Counters from one cleanup pass."""

    total_files: int = 0
    deleted: int = 0
    kept: int = 0
    errors: int = 0
    bytes_freed: int = 0

    @property
    def mb_freed(self) -> float:
        return self.bytes_freed / _BYTES_PER_MB


class CategoryStats(_Report):
    count: int = 0
    bytes: int = 0

    def add(self, size: int) -> None:
        self.count += 1
        self.bytes += size


class DirectoryStats(_Report):
    """Census of one directory (the root or a single shard)."""

    name: str
    normal_images: CategoryStats = Field(default_factory=CategoryStats)
    transparent_images: CategoryStats = Field(default_factory=CategoryStats)
    uncategorized: CategoryStats = Field(default_factory=CategoryStats)
    metadata_bytes: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def entries(self) -> int:
        return self.normal_images.count + self.transparent_images.count + self.uncategorized.count

    @computed_field(alias="imageBytes")  # type: ignore[prop-decorator]
    @property
    def image_bytes(self) -> int:
        return self.normal_images.bytes + self.transparent_images.bytes + self.uncategorized.bytes


class ShardDistribution(_Report):
    """Entry-count spread across shard directories (root excluded)."""

    non_empty: int = 0
    empty: int = 0
    min_entries: int = 0
    max_entries: int = 0
    mean_entries: float = 0.0
    median_entries: float = 0.0


class CacheStatistics(_Report):
    """Point-in-time census of a whole cache directory."""

    cache_dir: str
    entries: int = 0
    image_bytes: int = 0
    metadata_bytes: int = 0
    normal_images: CategoryStats = Field(default_factory=CategoryStats)
    transparent_images: CategoryStats = Field(default_factory=CategoryStats)
    uncategorized: CategoryStats = Field(default_factory=CategoryStats)
    shards: ShardDistribution = Field(default_factory=ShardDistribution)
    busiest_shards: list[DirectoryStats] = Field(default_factory=list)
    quietest_shards: list[DirectoryStats] = Field(default_factory=list)

    @computed_field(alias="totalBytes")  # type: ignore[prop-decorator]
    @property
    def total_bytes(self) -> int:
        return self.image_bytes + self.metadata_bytes
