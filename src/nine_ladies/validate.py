"""Per-item image checks.

``validate_image`` is the full check used by live runs; ``check_readable`` is
the existence-only check used by dry runs and never reads file content.
"""

from __future__ import annotations

import os

from .schemas import FailureKind, ItemFailure, ValidatedImage, ValidationIssue
from .sniff import sniff_format

__all__ = ["validate_image", "check_readable"]


def validate_image(path: str) -> ValidatedImage | ItemFailure:
    if not os.path.exists(path):
        return ItemFailure(path, FailureKind.NOT_FOUND, "file not found")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        return ItemFailure(path, FailureKind.UNREADABLE, f"cannot read file: {e.strerror or e}")
    fmt = sniff_format(data)
    if fmt is None:
        return ItemFailure(
            path,
            FailureKind.UNSUPPORTED_FORMAT,
            "not a valid image format (expected JPEG, PNG, WebP, or GIF)",
        )
    return ValidatedImage(path=path, format=fmt, data=data)


def check_readable(path: str) -> ValidationIssue | None:
    if not os.path.exists(path):
        return ValidationIssue(path, FailureKind.NOT_FOUND, "file not found")
    try:
        # opening is enough to prove readability; content is not needed
        with open(path, "rb"):
            pass
    except OSError as e:
        return ValidationIssue(path, FailureKind.UNREADABLE, f"cannot open file: {e.strerror or e}")
    return None
