"""imagecache — sharded disk cache for transformed images."""

from imagecache.cache.keys import generate_cache_key
from imagecache.cache.store import ShardedCacheStore
from imagecache.core import CachedImageResizer
from imagecache.types import CacheEntry, TransformedImage, TransformRequest

__all__ = [
    "CacheEntry",
    "CachedImageResizer",
    "ShardedCacheStore",
    "TransformRequest",
    "TransformedImage",
    "generate_cache_key",
]
