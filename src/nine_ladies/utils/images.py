from __future__ import annotations

import base64
from typing import Any, Dict

from ..schemas import ValidatedImage

__all__ = [
    "image_b64",
    "image_data_url",
    "image_part",
]


def image_b64(image: ValidatedImage) -> str:
    """Base64-encode the original file bytes; pixels are never re-encoded."""
    return base64.b64encode(image.data).decode("ascii")


def image_data_url(image: ValidatedImage) -> str:
    return f"data:{image.format.mime_type};base64,{image_b64(image)}"


def image_part(image: ValidatedImage) -> Dict[str, Any]:
    """Return an OpenAI chat image_url part carrying the image inline."""
    return {"type": "image_url", "image_url": {"url": image_data_url(image)}}
