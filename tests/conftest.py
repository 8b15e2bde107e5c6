"""Shared test fixtures for nine-ladies tests."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Callable

import pytest
from PIL import Image

from nine_ladies.logging import set_verbosity
from nine_ladies.schemas import ModelResult, PromptConfig, ValidatedImage, parse_model_output

# first 12+ bytes of each supported format
PNG_HEADER = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
JPEG_HEADER = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01"
GIF_HEADER = b"GIF89a\x01\x00\x01\x00\x80\x00\x00"
WEBP_HEADER = b"RIFF\x24\x00\x00\x00WEBPVP8 "


@pytest.fixture(autouse=True)
def _reset_log_level():
    set_verbosity()
    yield
    set_verbosity()


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Write a tiny real image with Pillow and return its path."""

    def _make(name: str = "sample.png", fmt: str = "PNG") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        im = Image.new("RGB", (8, 6), color=(10, 20, 30))
        im.save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def write_prompt(tmp_path: Path) -> Callable[..., Path]:
    """Write a prompt file; pass a dict for JSON or a str for raw content."""

    def _write(content: dict[str, Any] | str | None = None, name: str = "prompt.json") -> Path:
        if content is None:
            content = {"system": "S", "prompt": "P", "temperature": 0.3}
        path = tmp_path / name
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return path

    return _write


@pytest.fixture
def prompt_config() -> PromptConfig:
    return PromptConfig(system="You describe images.", prompt="Describe this image.", temperature=0.2)


@pytest.fixture
def validated_png() -> ValidatedImage:
    from nine_ladies.sniff import ImageFormat

    return ValidatedImage(path="img.png", format=ImageFormat.PNG, data=PNG_HEADER + b"\x00" * 8)


class FakeClient:
    """Backend double recording every call; never touches the network.

    ``replies`` maps a path to reply text, or to an exception to raise.
    """

    def __init__(self, default: str = "a cat", replies: dict[str, Any] | None = None) -> None:
        self.default = default
        self.replies = replies or {}
        self.calls: list[tuple[str, str | None]] = []

    def infer(
        self, image: ValidatedImage, config: PromptConfig, model: str | None = None
    ) -> ModelResult:
        self.calls.append((image.path, model))
        reply = self.replies.get(image.path, self.default)
        if isinstance(reply, Exception):
            raise reply
        return parse_model_output(reply)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def client_factory() -> type[FakeClient]:
    return FakeClient


@pytest.fixture
def stdin_lines(monkeypatch: pytest.MonkeyPatch) -> Callable[[list[str]], None]:
    def _set(lines: list[str]) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("".join(f"{ln}\n" for ln in lines)))

    return _set
