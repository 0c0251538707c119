"""Image processing helpers used by the infrastructure layer."""
from __future__ import annotations

import base64
import logging
from typing import Optional, Tuple

import cv2  # type: ignore
import numpy as np

logger = logging.getLogger(__name__)

# Formats the vision model accepts directly; anything else is converted to PNG.
VISION_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/jpg", "image/webp"})

_ENCODE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/tiff": ".tiff",
    "image/bmp": ".bmp",
    "image/webp": ".webp",
}


def decode_image(data: bytes) -> Optional[np.ndarray]:
    """Decode encoded image bytes into a BGR array, or ``None`` if undecodable."""

    if not data:
        return None
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        logger.debug("cv2 could not decode %d bytes", len(data))
    return image


def encode_image(image: np.ndarray, mime_type: str) -> bytes:
    """Encode a BGR array in the format named by ``mime_type``."""

    extension = _ENCODE_EXTENSIONS.get((mime_type or "").lower())
    if extension is None:
        raise ValueError(f"Cannot encode image as {mime_type!r}")
    ok, encoded = cv2.imencode(extension, image)
    if not ok:
        raise ValueError(f"Encoding image as {mime_type!r} failed")
    return encoded.tobytes()


def ensure_vision_compatible(data: bytes, mime_type: str) -> Tuple[bytes, str]:
    """Convert formats the vision model rejects (TIFF, BMP) to PNG."""

    mime_type = (mime_type or "").lower()
    if mime_type in VISION_MIME_TYPES:
        return data, mime_type

    image = decode_image(data)
    if image is None:
        raise ValueError(f"Unable to decode {mime_type or 'unknown'} image for conversion")
    return encode_image(image, "image/png"), "image/png"


def image_to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """Convert image bytes to a data URL suitable for OpenAI Vision."""

    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type or 'image/png'};base64,{encoded}"
