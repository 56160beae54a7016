"""Acquire source images from URLs, inline data URIs or local files."""
from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

from ..core.config import REQUEST_TIMEOUT
from ..core.errors import SourceError
from ..core.pixel_grid import PixelGrid

LOGGER = logging.getLogger("albedo_maps.sources")

DATA_URI_PREFIX = "data:image/"


@dataclass(frozen=True)
class SourceImage:
    """Raw bytes of a source image together with its decoded grid."""

    name: Optional[str]
    data: bytes
    grid: PixelGrid


def is_data_uri(reference: str) -> bool:
    return reference.startswith(DATA_URI_PREFIX)


def is_http_url(reference: str) -> bool:
    parsed = urlparse(reference)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def decode_data_uri(reference: str) -> bytes:
    """Return the bytes encoded in a ``data:image/...;base64,`` URI.

    Everything up to the first comma is treated as the header. Whitespace in
    the payload (MIME-style line wrapping) is ignored.
    """

    header, separator, payload = reference.partition(",")
    if not separator:
        raise SourceError(f"Data URI has no payload: {header[:40]}")
    payload = "".join(payload.split())
    if not payload:
        raise SourceError("Data URI payload is empty")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SourceError(f"Invalid base64 image data: {exc}") from exc


def fetch_url(url: str, *, timeout: float = REQUEST_TIMEOUT) -> bytes:
    """Download *url* and return the response body."""

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise SourceError(f"Failed to download image from {url}: {exc}") from exc
    return response.content


def decode_image(data: bytes) -> PixelGrid:
    """Decode encoded image bytes (PNG, JPEG, ...) to a frozen grid."""

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            grid = PixelGrid.from_image(image)
    except (UnidentifiedImageError, OSError) as exc:
        raise SourceError(f"Failed to decode image: {exc}") from exc
    if grid.width == 0 or grid.height == 0:
        raise SourceError("Decoded image is empty")
    return grid


def load_source(reference: str, *, timeout: float = REQUEST_TIMEOUT) -> SourceImage:
    """Resolve *reference* to image bytes and decode them.

    *reference* may be a ``data:image/`` URI, an absolute ``http``/``https``
    URL or a path to a local file.
    """

    reference = (reference or "").strip()
    if not reference:
        raise SourceError("Image reference is empty; provide a URL, base64 data or a file path")

    if is_data_uri(reference):
        LOGGER.info("Detected base64 image data, decoding")
        data = decode_data_uri(reference)
        name = None
    elif is_http_url(reference):
        LOGGER.info("Downloading image from %s", reference)
        data = fetch_url(reference, timeout=timeout)
        name = Path(urlparse(reference).path).name or None
    elif "://" in reference:
        raise SourceError(f"Unsupported image reference: {reference}")
    else:
        path = Path(reference)
        if not path.is_file():
            raise SourceError(f"File not found: {path}")
        data = path.read_bytes()
        name = path.name

    return SourceImage(name=name, data=data, grid=decode_image(data))
