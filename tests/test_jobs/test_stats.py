"""Tests for the statistics job."""

import inspect
import json

import pytest

from imagecache.cache.store import ShardedCacheStore
from imagecache.config.defaults import DEFAULT_SCAN_WORKERS
from imagecache.errors.exceptions import CacheRootError
from imagecache.jobs.stats import collect_statistics, scan_directory
from imagecache.types import CacheEntry

AA = "aa11" + "0" * 60
DEAD = "deadbeef" + "0" * 56

TRANSPARENT_META = {"headers": [], "status": 200, "statusText": "OK", "isTransparent": True}


def _key(prefix: str, n: int = 0) -> str:
    return (prefix + f"{n:x}" + "0" * 64)[:64]


class TestCollectStatistics:
    async def test_normal_entry_from_put(self, cache_dir):
        store = ShardedCacheStore(cache_dir)
        await store.put(AA, CacheEntry(payload=b"\x89PNG...", status=200, is_transparent=False))
        assert (cache_dir / "aa" / AA).exists()

        stats = await collect_statistics(cache_dir)
        assert stats.normal_images.count == 1
        assert stats.transparent_images.count == 0
        assert stats.normal_images.bytes == len(b"\x89PNG...")
        assert stats.entries == 1

    async def test_transparent_entry(self, cache_dir, write_pair):
        write_pair(cache_dir / "aa", AA, payload=b"1234", meta=TRANSPARENT_META)
        stats = await collect_statistics(cache_dir)
        assert stats.transparent_images.count == 1
        assert stats.transparent_images.bytes == 4
        assert stats.normal_images.count == 0

    async def test_flat_file_without_sidecar_is_uncategorized(self, cache_dir, write_pair):
        write_pair(cache_dir, DEAD, payload=b"orphan", meta=None)
        stats = await collect_statistics(cache_dir)
        assert stats.uncategorized.count == 1
        assert stats.uncategorized.bytes == 6
        assert await ShardedCacheStore(cache_dir).get(DEAD) is None

    async def test_corrupt_sidecar_is_uncategorized(self, cache_dir, write_pair):
        write_pair(cache_dir / "aa", AA, payload=b"abc", meta=None)
        (cache_dir / "aa" / f"{AA}.json").write_text('{"headers": [')
        stats = await collect_statistics(cache_dir)
        assert stats.uncategorized.count == 1
        assert stats.normal_images.count == 0
        assert stats.metadata_bytes == len('{"headers": [')

    async def test_zero_length_and_missing_data_skipped(self, cache_dir, write_pair):
        write_pair(cache_dir / "aa", AA, payload=b"")
        (cache_dir / "aa" / f"{_key('aa', 1)}.json").write_text("{}")
        stats = await collect_statistics(cache_dir)
        assert stats.entries == 0
        assert stats.metadata_bytes > 0

    async def test_bytes_totals(self, cache_dir, write_pair):
        write_pair(cache_dir / "aa", AA, payload=b"x" * 10)
        write_pair(cache_dir, DEAD, payload=b"y" * 5, meta=None)
        meta_size = (cache_dir / "aa" / f"{AA}.json").stat().st_size

        stats = await collect_statistics(cache_dir)
        assert stats.image_bytes == 15
        assert stats.metadata_bytes == meta_size
        assert stats.total_bytes == 15 + meta_size

    async def test_temp_files_ignored(self, cache_dir):
        (cache_dir / "aa").mkdir()
        (cache_dir / "aa" / f"{AA}.abc123.tmp").write_bytes(b"partial")
        stats = await collect_statistics(cache_dir)
        assert stats.entries == 0

    async def test_empty_cache(self, cache_dir):
        stats = await collect_statistics(cache_dir)
        assert stats.entries == 0
        assert stats.shards.non_empty == 0
        assert stats.shards.empty == 256
        assert stats.busiest_shards == []

    async def test_missing_root_is_fatal(self, tmp_path):
        with pytest.raises(CacheRootError):
            await collect_statistics(tmp_path / "missing")

    def test_default_workers_from_config_defaults(self):
        default = inspect.signature(collect_statistics).parameters["scan_workers"].default
        assert default == DEFAULT_SCAN_WORKERS

    async def test_read_only(self, cache_dir, write_pair):
        write_pair(cache_dir, DEAD)
        write_pair(cache_dir / "aa", AA)
        before = sorted(p.relative_to(cache_dir) for p in cache_dir.rglob("*"))
        await collect_statistics(cache_dir)
        after = sorted(p.relative_to(cache_dir) for p in cache_dir.rglob("*"))
        assert before == after


class TestShardDistribution:
    async def test_distribution_excludes_root(self, cache_dir, write_pair):
        for n in range(3):
            write_pair(cache_dir / "aa", _key("aa", n))
        write_pair(cache_dir / "bb", _key("bb"))
        for n in range(5):
            write_pair(cache_dir, _key("cc", n))  # flat, root only

        stats = await collect_statistics(cache_dir)
        dist = stats.shards
        assert stats.entries == 9
        assert dist.non_empty == 2
        assert dist.empty == 254
        assert dist.min_entries == 1
        assert dist.max_entries == 3
        assert dist.mean_entries == 2.0
        assert dist.median_entries == 2.0

    async def test_busiest_and_quietest(self, cache_dir, write_pair):
        for i in range(12):
            shard = f"{i:02x}"
            for n in range(i + 1):
                write_pair(cache_dir / shard, _key(shard, n))

        stats = await collect_statistics(cache_dir, scan_workers=4)
        busiest = [s.name for s in stats.busiest_shards]
        quietest = [s.name for s in stats.quietest_shards]
        assert len(busiest) == 10
        assert busiest[0] == "0b"
        assert stats.busiest_shards[0].entries == 12
        assert quietest[0] == "00"
        assert stats.quietest_shards[0].entries == 1
        assert "0b" not in quietest

    async def test_shard_annotations(self, cache_dir, write_pair):
        write_pair(cache_dir / "aa", _key("aa", 1), payload=b"12")
        write_pair(cache_dir / "aa", _key("aa", 2), payload=b"345", meta=TRANSPARENT_META)
        write_pair(cache_dir / "aa", _key("aa", 3), payload=b"6", meta=None)

        stats = await collect_statistics(cache_dir)
        (shard,) = stats.busiest_shards
        assert shard.name == "aa"
        assert shard.entries == 3
        assert shard.image_bytes == 6
        assert shard.normal_images.count == 1
        assert shard.transparent_images.count == 1
        assert shard.uncategorized.count == 1


class TestScanDirectory:
    def test_missing_directory_is_empty(self, tmp_path):
        result = scan_directory(tmp_path / "nope", "ab")
        assert result.entries == 0

    def test_required_directory_raises(self, tmp_path):
        with pytest.raises(CacheRootError):
            scan_directory(tmp_path / "nope", ".", required=True)


class TestSerialization:
    async def test_camel_case_json(self, cache_dir, write_pair):
        write_pair(cache_dir / "aa", AA)
        stats = await collect_statistics(cache_dir)
        data = json.loads(stats.model_dump_json(by_alias=True))
        assert data["normalImages"]["count"] == 1
        assert data["transparentImages"]["count"] == 0
        assert "totalBytes" in data
        assert data["shards"]["nonEmpty"] == 1
