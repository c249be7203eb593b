"""Cache key generation — content-addressed request fingerprints."""

from __future__ import annotations

import hashlib

from imagecache.types import TransformRequest

_DELIMITER = "|"


def generate_cache_key(
    src: str,
    width: int = 0,
    height: int = 0,
    quality: int = 75,
    remove_background: bool = False,
) -> str:
    """Generate a SHA256 cache key from all request-defining inputs.

    The background flag is part of the preimage even though nothing in the
    on-disk layout names it, so the plain and transparent variants of the
    same source never share an entry.
    """
    components = [
        src,
        str(width),
        str(height),
        str(quality),
        "true" if remove_background else "false",
    ]
    combined = _DELIMITER.join(components)
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()


def request_cache_key(request: TransformRequest) -> str:
    """Cache key for a TransformRequest."""
    return generate_cache_key(
        request.src,
        width=request.width,
        height=request.height,
        quality=request.quality,
        remove_background=request.remove_background,
    )
