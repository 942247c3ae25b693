"""Uploaded image helpers — data-URL decoding and size probing."""

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO
from urllib.parse import unquote_to_bytes

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def decode_data_url(value: str | bytes) -> bytes:
    """Return the payload bytes of a ``data:`` URL.

    Raw bytes that are not a data URL are returned unchanged.

    Raises
    ------
    ValueError
        If *value* looks like a data URL but cannot be decoded.
    """
    if isinstance(value, (bytes, bytearray)):
        if not bytes(value).startswith(b"data:"):
            return bytes(value)
        value = bytes(value).decode("ascii", errors="strict")

    if not value.startswith("data:"):
        raise ValueError("Expected a data: URL")
    header, sep, payload = value.partition(",")
    if not sep:
        raise ValueError("Malformed data: URL (missing ',')")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Invalid base64 payload in data: URL: {exc}") from exc
    return unquote_to_bytes(payload)


def image_size(data: bytes) -> tuple[int, int] | None:
    """Pixel ``(width, height)`` of an encoded image, or *None* if unreadable."""
    try:
        with Image.open(BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError, ValueError):
        logger.debug("Could not read image size", exc_info=True)
        return None
