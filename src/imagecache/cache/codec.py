"""Entry codec — data file plus JSON metadata sidecar."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from imagecache.types import CACHE_STATUS_HEADER, CacheEntry

METADATA_SUFFIX = ".json"


class EntryMetadata(BaseModel):
    """Sidecar record stored next to each data file.

    Field names on disk are ``headers``, ``status``, ``statusText`` and
    ``isTransparent``. Defaults cover sidecars written before a field existed.
    """

    model_config = ConfigDict(populate_by_name=True)

    headers: list[tuple[str, str]] = Field(default_factory=list)
    status: int = 200
    status_text: str = Field(default="OK", alias="statusText")
    is_transparent: bool = Field(default=False, alias="isTransparent")


def metadata_path_name(data_name: str) -> str:
    """Sidecar file name for a data file name."""
    return data_name + METADATA_SUFFIX


def is_metadata_name(name: str) -> bool:
    return name.endswith(METADATA_SUFFIX)


def data_name_for(metadata_name: str) -> str:
    """Data file name a sidecar belongs to."""
    return metadata_name[: -len(METADATA_SUFFIX)]


def storable_headers(headers: dict[str, str]) -> list[tuple[str, str]]:
    """Headers in insertion order, minus the routing-layer cache-status header."""
    excluded = CACHE_STATUS_HEADER.lower()
    return [(name, value) for name, value in headers.items() if name.lower() != excluded]


def encode_metadata(entry: CacheEntry) -> bytes:
    """Serialize the metadata half of an entry to sidecar bytes."""
    meta = EntryMetadata(
        headers=storable_headers(entry.headers),
        status=entry.status,
        status_text=entry.status_text,
        is_transparent=entry.is_transparent,
    )
    return meta.model_dump_json(by_alias=True).encode("utf-8")


def decode_metadata(raw: bytes | str) -> EntryMetadata:
    """Parse sidecar bytes.

    Raises ValueError (pydantic.ValidationError) for truncated, non-JSON or
    mistyped content.
    """
    return EntryMetadata.model_validate_json(raw)


def decode_entry(payload: bytes, raw_metadata: bytes | str) -> CacheEntry:
    """Rebuild a CacheEntry from a data file and its sidecar."""
    meta = decode_metadata(raw_metadata)
    return CacheEntry(
        payload=payload,
        headers=dict(meta.headers),
        status=meta.status,
        status_text=meta.status_text,
        is_transparent=meta.is_transparent,
    )
