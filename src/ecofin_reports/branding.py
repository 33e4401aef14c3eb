# EcoFin Reports - Financial analytics & reporting for environmental consultancies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Branding images for exported reports (header, footer, watermark).

Images are referenced by the branding settings in one of these forms:

- a ``data:image/...;base64,`` URL (already inlined),
- an absolute ``http://`` / ``https://`` URL,
- a site-relative URL (``/branding/header.png``), resolved against the
  configured base URL,
- a storage path, resolved against the local assets directory.

A missing or unreachable image never aborts an export: the fetcher logs a
warning and the document is rendered without that element.

Images are fetched one after the other, and the watermark opacity transform
runs after the fetches, so that every asset is ready before any page is
laid out.
"""

import asyncio
import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Optional, Union

import httpx
from PIL import Image

from .exceptions import MissingBrandingAsset
from .models import BrandingAssets

logger = logging.getLogger(__name__)

DEFAULT_WATERMARK_OPACITY = 0.15
DEFAULT_TIMEOUT_SECONDS = 10.0


def image_size(data: bytes) -> tuple[int, int]:
    """Return the pixel size (width, height) of an encoded image."""
    with Image.open(io.BytesIO(data)) as img:
        return img.size


def fit_image_size(
    size: tuple[float, float], max_width: float, max_height: float
) -> tuple[float, float]:
    """
    Scale ``size`` to fit within ``max_width`` x ``max_height``.

    The aspect ratio is preserved. Images smaller than the box are scaled
    up until one side touches it.
    """
    width, height = size
    if width <= 0 or height <= 0:
        return (0.0, 0.0)
    ratio = min(max_width / width, max_height / height)
    return (width * ratio, height * ratio)


def apply_image_opacity(data: bytes, opacity: float) -> bytes:
    """
    Return a PNG copy of ``data`` whose alpha channel is scaled by ``opacity``.

    ``opacity`` is clamped to [0, 1].
    """
    factor = min(max(opacity, 0.0), 1.0)
    with Image.open(io.BytesIO(data)) as img:
        rgba = img.convert("RGBA")

    alpha = rgba.getchannel("A").point(lambda a: int(round(a * factor)))
    rgba.putalpha(alpha)

    out = io.BytesIO()
    rgba.save(out, format="PNG")
    return out.getvalue()


def _decode_data_url(source: str) -> bytes:
    header, sep, payload = source.partition(",")
    if not sep or ";base64" not in header:
        raise MissingBrandingAsset(source[:32], "unsupported data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise MissingBrandingAsset(source[:32], "invalid base64 payload") from exc


class BrandingFetcher:
    """Fetch branding images from URLs, data URLs or local storage."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        assets_dir: Optional[Union[str, Path]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.assets_dir = Path(assets_dir) if assets_dir else Path.cwd()
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, source: Optional[str]) -> Optional[bytes]:
        """
        Return the raw bytes of the image referenced by ``source``.

        Returns None when ``source`` is empty or the image cannot be
        obtained (the failure is logged).
        """
        if not source or not isinstance(source, str) or not source.strip():
            return None

        try:
            return await self._fetch_bytes(source.strip())
        except MissingBrandingAsset as exc:
            logger.warning("%s", exc)
            return None

    async def _fetch_bytes(self, source: str) -> bytes:
        if source.startswith("data:image"):
            return _decode_data_url(source)

        if source.startswith(("http://", "https://")):
            return await self._download(source)

        if source.startswith("/"):
            if not self.base_url:
                raise MissingBrandingAsset(source, "relative URL without base_url")
            return await self._download(self.base_url + source)

        path = self.assets_dir / source
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise MissingBrandingAsset(source, f"cannot read {path}") from exc

    async def _download(self, url: str) -> bytes:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.TimeoutException as exc:
                raise MissingBrandingAsset(
                    url, f"timeout after {self.timeout}s"
                ) from exc
            except httpx.HTTPStatusError as exc:
                raise MissingBrandingAsset(
                    url, f"HTTP {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                raise MissingBrandingAsset(url, str(exc) or type(exc).__name__) from exc
            except (httpx.InvalidURL, ValueError) as exc:
                raise MissingBrandingAsset(url, f"invalid URL: {exc}") from exc

        return response.content


async def load_branding_assets(
    fetcher: BrandingFetcher,
    header: Optional[str] = None,
    footer: Optional[str] = None,
    watermark: Optional[str] = None,
    watermark_opacity: float = DEFAULT_WATERMARK_OPACITY,
) -> BrandingAssets:
    """
    Fetch the three branding images sequentially and prepare the watermark.

    Each image is independent: a failure only removes that image.
    """
    header_bytes = await fetcher.fetch(header)
    footer_bytes = await fetcher.fetch(footer)
    watermark_raw = await fetcher.fetch(watermark)

    watermark_bytes: Optional[bytes] = None
    if watermark_raw is not None:
        try:
            watermark_bytes = await asyncio.to_thread(
                apply_image_opacity, watermark_raw, watermark_opacity
            )
        except (OSError, ValueError) as exc:
            logger.warning("Watermark image could not be decoded: %s", exc)

    return BrandingAssets(
        header=header_bytes,
        footer=footer_bytes,
        watermark=watermark_bytes,
    )
