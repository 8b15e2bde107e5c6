"""Candidate ingestion.

Candidates are paths exactly as written by the operator (trimmed), yielded
lazily so a long input stream is never held in memory.
"""

from __future__ import annotations

import sys
from itertools import islice
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from .logging import get_logger

logger = get_logger(__name__)

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


def iter_candidates(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        line = line.strip()
        if not line:
            continue
        yield line


def iter_list_file(list_file: Path) -> Iterator[str]:
    with list_file.open("r", encoding="utf-8") as f:
        yield from iter_candidates(f)


def iter_folder(folder: Path) -> Iterator[str]:
    for p in sorted(folder.rglob("*")):
        if p.is_file() and p.suffix.lower() in IMAGE_EXTS:
            yield str(p)


def open_candidates(
    source: str | None, stdin: TextIO | None = None, limit: int | None = None
) -> Iterator[str]:
    """Yield candidates from stdin (None or ``-``), a list file, or a folder."""
    if source is None or source == "-":
        it = iter_candidates(stdin if stdin is not None else sys.stdin)
    else:
        p = Path(source)
        if p.is_dir():
            logger.debug("walking folder %s", p)
            it = iter_folder(p)
        elif p.is_file():
            it = iter_list_file(p)
        else:
            raise FileNotFoundError(f"input not found: {source}")
    if limit:
        it = islice(it, limit)
    return it
