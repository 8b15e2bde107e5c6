"""Tests for prompt config loading and model output tagging."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from pydantic import ValidationError

from nine_ladies.errors import ConfigError
from nine_ladies.schemas import (
    PromptConfig,
    RunConfig,
    Structured,
    Text,
    load_prompt_config,
    parse_model_output,
)


class TestLoadPromptConfig:
    """Test cases for reading the prompt file."""

    def test_valid_prompt_file(self, write_prompt: Callable[..., Path]) -> None:
        path = write_prompt({"system": "S", "prompt": "P", "temperature": 0.3, "model": "qwen"})
        cfg = load_prompt_config(path)
        assert cfg.system == "S"
        assert cfg.prompt == "P"
        assert cfg.temperature == pytest.approx(0.3)
        assert cfg.model == "qwen"

    def test_model_is_optional_and_extra_keys_ignored(self, write_prompt: Callable[..., Path]) -> None:
        path = write_prompt({"system": "S", "prompt": "P", "temperature": 1, "notes": "x"})
        cfg = load_prompt_config(path)
        assert cfg.model is None
        assert cfg.temperature == 1.0

    @pytest.mark.parametrize("temperature", [0.0, 2.0])
    def test_temperature_bounds_inclusive(self, write_prompt: Callable[..., Path], temperature: float) -> None:
        path = write_prompt({"system": "S", "prompt": "P", "temperature": temperature})
        assert load_prompt_config(path).temperature == temperature

    @pytest.mark.parametrize(
        "content",
        [
            {"system": "S", "prompt": "P", "temperature": -0.1},
            {"system": "S", "prompt": "P", "temperature": 2.01},
            {"system": "S", "prompt": "P", "temperature": "0.3"},
            {"system": "S", "prompt": "P", "temperature": True},
            {"prompt": "P", "temperature": 0.3},
            {"system": "S", "temperature": 0.3},
            {"system": "S", "prompt": "P"},
            {"system": "", "prompt": "P", "temperature": 0.3},
            {"system": "S", "prompt": "   ", "temperature": 0.3},
            {"system": "S", "prompt": 5, "temperature": 0.3},
            '["not", "an", "object"]',
            "{not json",
        ],
    )
    def test_invalid_prompt_files_raise_config_error(
        self, write_prompt: Callable[..., Path], content: dict | str
    ) -> None:
        path = write_prompt(content)
        with pytest.raises(ConfigError):
            load_prompt_config(path)

    def test_missing_prompt_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="failed to read"):
            load_prompt_config(tmp_path / "nope.json")

    def test_error_names_the_field(self, write_prompt: Callable[..., Path]) -> None:
        path = write_prompt({"system": "S", "prompt": "P", "temperature": 9})
        with pytest.raises(ConfigError, match="temperature"):
            load_prompt_config(path)

    def test_prompt_config_is_immutable(self) -> None:
        cfg = PromptConfig(system="S", prompt="P", temperature=0.5)
        with pytest.raises(ValidationError):
            cfg.temperature = 1.0  # type: ignore[misc]


class TestParseModelOutput:
    """Test cases for tagging replies as Text or Structured."""

    def test_plain_text(self) -> None:
        assert parse_model_output("a cat") == Text("a cat")

    def test_json_object(self) -> None:
        result = parse_model_output('{"animal": "cat", "count": 2}')
        assert result == Structured({"animal": "cat", "count": 2})

    def test_json_array_with_whitespace(self) -> None:
        assert parse_model_output('\n [1, 2, 3] \n') == Structured([1, 2, 3])

    def test_fenced_json(self) -> None:
        result = parse_model_output('```json\n{"tags": ["cat", "sofa"]}\n```')
        assert result == Structured({"tags": ["cat", "sofa"]})

    def test_text_around_json_stays_text(self) -> None:
        reply = 'Here you go: {"a": 1}'
        assert parse_model_output(reply) == Text(reply)

    def test_nan_is_not_structured(self) -> None:
        assert isinstance(parse_model_output("NaN"), Text)

    def test_empty_reply_is_text(self) -> None:
        assert parse_model_output("") == Text("")


class TestRunConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        cfg = RunConfig(prompt_file=tmp_path / "p.json")
        assert cfg.backend == "chat"
        assert cfg.max_workers == 1
        assert cfg.dry_run is False
        assert cfg.limit is None
        assert cfg.default_model is None

    @pytest.mark.parametrize("field,value", [("max_workers", 0), ("timeout", 0), ("rpm", -1), ("limit", -1)])
    def test_rejects_bad_values(self, tmp_path: Path, field: str, value: int) -> None:
        with pytest.raises(ValidationError):
            RunConfig(prompt_file=tmp_path / "p.json", **{field: value})
