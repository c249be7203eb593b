"""Shared Pydantic models for imagecache."""

from __future__ import annotations

from pydantic import BaseModel, Field

# Routing-layer header that must never be persisted with an entry
CACHE_STATUS_HEADER = "X-Cache"
SERVER_HEADER = "Server"
SERVER_NAME = "NextImageTransformation"


class CacheEntry(BaseModel):
    """A stored artifact: the transformed image plus its response metadata."""

    payload: bytes
    headers: dict[str, str] = Field(default_factory=dict)
    status: int = 200
    status_text: str = "OK"
    is_transparent: bool = False

    @property
    def size_bytes(self) -> int:
        return len(self.payload)


class TransformRequest(BaseModel):
    """Request-defining parameters of one image transformation."""

    src: str
    width: int = 0
    height: int = 0
    quality: int = 75
    remove_background: bool = False


class TransformedImage(BaseModel):
    """Result returned by an image transformer (or served from cache)."""

    payload: bytes
    headers: dict[str, str] = Field(default_factory=dict)
    status: int = 200
    status_text: str = "OK"
    is_transparent: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def to_entry(self) -> CacheEntry:
        return CacheEntry(
            payload=self.payload,
            headers=dict(self.headers),
            status=self.status,
            status_text=self.status_text,
            is_transparent=self.is_transparent,
        )

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> TransformedImage:
        return cls(
            payload=entry.payload,
            headers=dict(entry.headers),
            status=entry.status,
            status_text=entry.status_text,
            is_transparent=entry.is_transparent,
        )
