"""Content-based image format detection.

Only the leading signature bytes are inspected; filename suffixes are ignored.
"""
from __future__ import annotations

from enum import Enum

__all__ = ["ImageFormat", "sniff_format", "MIN_SNIFF_BYTES"]

# shortest buffer that can carry every supported signature (RIFF....WEBP)
MIN_SNIFF_BYTES = 12

_JPEG = b"\xff\xd8\xff"
_PNG = b"\x89PNG\r\n\x1a\n"
_GIFS = (b"GIF87a", b"GIF89a")


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


def sniff_format(data: bytes) -> ImageFormat | None:
    """Classify ``data`` by signature; return None when unsupported."""
    if len(data) < MIN_SNIFF_BYTES:
        return None
    if data.startswith(_JPEG):
        return ImageFormat.JPEG
    if data.startswith(_PNG):
        return ImageFormat.PNG
    if data.startswith(_GIFS):
        return ImageFormat.GIF
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return ImageFormat.WEBP
    return None
