"""Tests for the read-through CachedImageResizer."""

from imagecache.cache.keys import request_cache_key
from imagecache.cache.store import ShardedCacheStore
from imagecache.config.schema import ImageCacheConfig
from imagecache.core import CachedImageResizer
from imagecache.types import TransformedImage, TransformRequest

REQUEST = TransformRequest(src="https://example.com/dog.png", width=64, height=64)


class FakeTransformer:
    def __init__(self, status: int = 200, is_transparent: bool = False):
        self.calls = 0
        self.status = status
        self.is_transparent = is_transparent
        self.closed = False

    async def transform(self, request):
        self.calls += 1
        return TransformedImage(
            payload=b"resized",
            headers={"content-type": "image/png", "server": "imgproxy"},
            status=self.status,
            status_text="OK" if self.status == 200 else "Bad Gateway",
            is_transparent=self.is_transparent,
        )

    async def aclose(self):
        self.closed = True


class TestCachedImageResizer:
    async def test_miss_then_hit(self, cache_dir):
        transformer = FakeTransformer()
        resizer = CachedImageResizer(ShardedCacheStore(cache_dir), transformer)

        first = await resizer.resize(REQUEST)
        second = await resizer.resize(REQUEST)

        assert first.headers["X-Cache"] == "MISS"
        assert second.headers["X-Cache"] == "HIT"
        assert second.payload == b"resized"
        assert transformer.calls == 1

    async def test_server_header_replaced(self, cache_dir):
        resizer = CachedImageResizer(ShardedCacheStore(cache_dir), FakeTransformer())
        image = await resizer.resize(REQUEST)
        assert image.headers["Server"] == "NextImageTransformation"
        assert "server" not in image.headers

    async def test_stored_under_request_key(self, cache_dir):
        store = ShardedCacheStore(cache_dir)
        resizer = CachedImageResizer(store, FakeTransformer(is_transparent=True))
        await resizer.resize(REQUEST)

        key = request_cache_key(REQUEST)
        entry = await store.get(key)
        assert (cache_dir / key[:2] / key).exists()
        assert entry.is_transparent is True
        assert "X-Cache" not in entry.headers

    async def test_upstream_failure_not_cached(self, cache_dir):
        store = ShardedCacheStore(cache_dir)
        transformer = FakeTransformer(status=502)
        resizer = CachedImageResizer(store, transformer)

        image = await resizer.resize(REQUEST)
        assert image.headers["X-Cache"] == "SKIP"
        assert await store.get(request_cache_key(REQUEST)) is None

    async def test_disabled_bypasses_store(self, cache_dir):
        store = ShardedCacheStore(cache_dir)
        transformer = FakeTransformer()
        resizer = CachedImageResizer(store, transformer, enabled=False)

        await resizer.resize(REQUEST)
        image = await resizer.resize(REQUEST)
        assert image.headers["X-Cache"] == "BYPASS"
        assert transformer.calls == 2
        assert list(cache_dir.iterdir()) == []

    async def test_variant_cached_separately(self, cache_dir):
        transformer = FakeTransformer()
        resizer = CachedImageResizer(ShardedCacheStore(cache_dir), transformer)
        await resizer.resize(REQUEST)
        variant = REQUEST.model_copy(update={"remove_background": True})
        image = await resizer.resize(variant)
        assert image.headers["X-Cache"] == "MISS"
        assert transformer.calls == 2

    async def test_close(self, cache_dir):
        transformer = FakeTransformer()
        resizer = CachedImageResizer(ShardedCacheStore(cache_dir), transformer)
        await resizer.close()
        assert transformer.closed

    def test_from_config(self, tmp_path):
        config = ImageCacheConfig(
            cache_dir=tmp_path / "c",
            imgproxy_url="http://imgproxy:8080",
            transform_timeout=5.0,
            cache_enabled=False,
        )
        resizer = CachedImageResizer.from_config(config)
        assert resizer.store.cache_dir == tmp_path / "c"
        assert resizer.enabled is False
