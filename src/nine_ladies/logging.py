"""Logging utilities with emoji level prefixes.

Usage:
    from .logging import get_logger
    logger = get_logger(__name__)

All loggers live under the ``nine_ladies`` namespace and share one stderr
handler, so stdout stays reserved for JSON Lines output.
"""
from __future__ import annotations

import logging
import sys
from typing import Dict

ROOT_NAME = "nine_ladies"

_LEVEL_EMOJI: Dict[int, str] = {
    logging.DEBUG: "🔍",
    logging.INFO: "🟢",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "🔥",
}


class _EmojiFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - simple override
        emoji = _LEVEL_EMOJI.get(record.levelno, "▫️")
        # copy so other handlers see the original message
        record = logging.makeLogRecord(record.__dict__)
        record.msg = f"{emoji} {record.msg}"
        return super().format(record)


class _StderrHandler(logging.StreamHandler):
    """StreamHandler that always writes to whatever ``sys.stderr`` currently is."""

    def __init__(self) -> None:
        super().__init__()

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, _value) -> None:
        pass


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    if not root.handlers:
        handler = _StderrHandler()
        fmt = _EmojiFormatter("%(asctime)s | %(name)s | %(levelname)s | %(message)s", "%H:%M:%S")
        handler.setFormatter(fmt)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        root.propagate = False
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger below the package root, configuring the root handler once.

    Idempotent: calling multiple times won't duplicate handlers.
    """
    root = _root()
    if not name or name == ROOT_NAME:
        return root
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)


def set_verbosity(verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.INFO
    _root().setLevel(level)
