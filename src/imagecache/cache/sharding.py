"""Shard layout — maps keys to two-level directory paths."""

from __future__ import annotations

import re
from pathlib import Path

SHARD_PREFIX_LENGTH = 2

# Every two-hex-digit bucket name, "00" through "ff"
SHARD_NAMES: tuple[str, ...] = tuple(f"{i:02x}" for i in range(16**SHARD_PREFIX_LENGTH))
SHARD_COUNT = len(SHARD_NAMES)

_SHARD_NAME_RE = re.compile(r"^[0-9a-f]{2}$", re.IGNORECASE)


def shard_for(key: str) -> str | None:
    """Return the shard bucket name for a key, or None for degenerate keys."""
    if len(key) < SHARD_PREFIX_LENGTH:
        return None
    return key[:SHARD_PREFIX_LENGTH]


def sharded_path(cache_dir: Path, key: str) -> Path:
    """Canonical base path for a key: ``cache_dir/key[:2]/key``.

    Keys shorter than the prefix fall back to ``cache_dir/key``; digest
    keys never hit this branch.
    """
    shard = shard_for(key)
    if shard is None:
        return cache_dir / key
    return cache_dir / shard / key


def flat_path(cache_dir: Path, key: str) -> Path:
    """Legacy pre-sharding base path for a key."""
    return cache_dir / key


def is_shard_name(name: str) -> bool:
    """True for names that look like a shard directory (two hex digits)."""
    return bool(_SHARD_NAME_RE.match(name))
