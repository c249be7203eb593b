"""Async client for an imgproxy-compatible transformation service."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from imagecache.config.defaults import DEFAULT_IMGPROXY_URL, DEFAULT_TRANSFORM_TIMEOUT
from imagecache.errors.exceptions import TransformError
from imagecache.types import TransformedImage, TransformRequest

logger = logging.getLogger(__name__)

_PRESET = "pr:sharp"
_ACCEPT = "image/avif,image/webp,image/apng,*/*"

# Describe the upstream body encoding, not the decoded payload we keep
_DROPPED_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}

# Pixel-level filter applied to the payload of background-removal requests
BackgroundRemover = Callable[[bytes], bytes]


class ImageTransformer(Protocol):
    """Anything that can produce a transformed image for a request."""

    async def transform(self, request: TransformRequest) -> TransformedImage: ...


class ImgproxyTransformer:
    """Fetches resized images from imgproxy over HTTP."""

    def __init__(
        self,
        base_url: str = DEFAULT_IMGPROXY_URL,
        client: httpx.AsyncClient | None = None,
        background_remover: BackgroundRemover | None = None,
        timeout: float = DEFAULT_TRANSFORM_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._background_remover = background_remover

    def build_url(self, request: TransformRequest) -> str:
        options = [
            _PRESET,
            f"resize:fill:{request.width}:{request.height}",
            f"q:{request.quality}",
        ]
        if request.remove_background:
            # Keep an alpha channel for the background filter
            options.append("f:png")
        return f"{self._base_url}/{'/'.join(options)}/plain/{request.src}"

    async def transform(self, request: TransformRequest) -> TransformedImage:
        """Fetch one transformed image.

        Non-2xx upstream responses are returned as-is; transport failures
        raise TransformError after retries.
        """
        url = self.build_url(request)
        try:
            response = await self._fetch(url)
        except httpx.HTTPError as e:
            raise TransformError(
                f"Image transformation failed for {request.src}: {e}", original=e
            ) from e

        payload = response.content
        is_transparent = False
        if request.remove_background and response.is_success and self._background_remover:
            payload = await asyncio.to_thread(self._background_remover, payload)
            is_transparent = True

        headers = {
            name: value
            for name, value in response.headers.items()
            if name.lower() not in _DROPPED_HEADERS
        }
        return TransformedImage(
            payload=payload,
            headers=headers,
            status=response.status_code,
            status_text=response.reason_phrase,
            is_transparent=is_transparent,
        )

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=5),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def _fetch(self, url: str) -> httpx.Response:
        logger.debug("Fetching %s", url)
        return await self._client.get(url, headers={"Accept": _ACCEPT})

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ImgproxyTransformer:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
