"""Error handling — exception hierarchy for the image cache."""

from imagecache.errors.exceptions import (
    CacheRootError,
    ImageCacheError,
    TransformError,
)

__all__ = [
    "ImageCacheError",
    "CacheRootError",
    "TransformError",
]
