"""Cache subsystem — sharded, content-addressed disk store."""

from imagecache.cache.codec import EntryMetadata, decode_entry, encode_metadata
from imagecache.cache.keys import generate_cache_key, request_cache_key
from imagecache.cache.sharding import SHARD_COUNT, SHARD_NAMES, is_shard_name, sharded_path
from imagecache.cache.store import ShardedCacheStore

__all__ = [
    "ShardedCacheStore",
    "EntryMetadata",
    "SHARD_COUNT",
    "SHARD_NAMES",
    "decode_entry",
    "encode_metadata",
    "generate_cache_key",
    "is_shard_name",
    "request_cache_key",
    "sharded_path",
]
