"""Custom exception hierarchy for imagecache."""

from __future__ import annotations

from pathlib import Path


class ImageCacheError(Exception):
    """Base exception for all imagecache errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class CacheRootError(ImageCacheError):
    """The cache root directory is missing or unreadable.

    Fatal for batch jobs: there is nothing to operate on.
    """

    def __init__(self, path: str | Path, original: Exception | None = None) -> None:
        reason = f": {original}" if original else ""
        super().__init__(f"Cache directory {path} is not readable{reason}")
        self.path = Path(path)
        self.original = original


class TransformError(ImageCacheError):
    """The upstream image transformation service could not be reached.

    Examples: connection refused, timeout, malformed response.
    """

    def __init__(
        self,
        message: str = "",
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.http_status = http_status
        self.original = original
