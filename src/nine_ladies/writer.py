from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import IO, Any

from .schemas import ModelResult, OutputRecord, Structured, Text


def response_value(result: ModelResult) -> Any:
    """JSON value for the ``response`` field: strings for Text, the value itself for Structured."""
    if isinstance(result, Text):
        return result.value
    if isinstance(result, Structured):
        return result.value
    raise TypeError(f"unknown model result type: {type(result).__name__}")


class JsonlWriter:
    """Write one ``{"file", "response"}`` object per line, flushing after each."""

    def __init__(self, fh: IO[str]) -> None:
        self.fh = fh
        self._owned = False
        self.count = 0

    @classmethod
    def open(cls, out_path: str | Path | None) -> "JsonlWriter":
        """Writer on stdout for None or ``-``; otherwise append to ``out_path``."""
        if out_path is None or str(out_path) == "-":
            return cls(sys.stdout)
        os.makedirs(os.path.dirname(str(out_path)) or ".", exist_ok=True)
        writer = cls(open(out_path, "a", encoding="utf-8"))
        writer._owned = True
        return writer

    def emit(self, record: OutputRecord) -> None:
        line = json.dumps(
            {"file": record.file, "response": response_value(record.response)},
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
        self.fh.write(line + "\n")
        self.fh.flush()
        self.count += 1

    def close(self) -> None:
        if self._owned:
            self.fh.close()

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
