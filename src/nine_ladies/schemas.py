"""Pydantic models and plain records describing prompts, images and run results."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .logging import get_logger
from .sniff import ImageFormat

logger = get_logger(__name__)


class PromptConfig(BaseModel):
    """Prompt file contents; shared read-only by every item of a run."""

    model_config = ConfigDict(frozen=True, extra="ignore", protected_namespaces=())

    system: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)
    temperature: float = Field(..., ge=0.0, le=2.0)
    model: str | None = None

    @field_validator("system", "prompt")
    @classmethod
    def _not_blank(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("temperature", mode="before")
    @classmethod
    def _temperature_is_number(cls, v: Any) -> Any:  # noqa: D401
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("temperature must be a number")
        return v


class RunConfig(BaseModel):
    prompt_file: Path
    url: str | None = None
    backend: str = "chat"
    model: str | None = None
    default_model: str | None = None
    api_key: str | None = None
    timeout: float = 120.0
    dry_run: bool = False
    input: str | None = None
    output: Path | None = None
    limit: int | None = None
    max_workers: int = 1
    rpm: int = 0
    progress: bool = False

    @field_validator("max_workers")
    @classmethod
    def _workers_positive(cls, v: int) -> int:  # noqa: D401
        if v <= 0:
            raise ValueError("max_workers must be > 0")
        return v

    @field_validator("timeout")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:  # noqa: D401
        if v <= 0:
            raise ValueError("timeout must be > 0")
        return v

    @field_validator("limit")
    @classmethod
    def _limit_non_negative(cls, v: int | None) -> int | None:  # noqa: D401
        if v is not None and v < 0:
            raise ValueError("limit must be >= 0")
        return v

    @field_validator("rpm")
    @classmethod
    def _rpm_non_negative(cls, v: int) -> int:  # noqa: D401
        if v < 0:
            raise ValueError("rpm must be >= 0")
        return v


@dataclass(frozen=True)
class ValidatedImage:
    path: str
    format: ImageFormat
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class Text:
    """Free-text model reply."""

    value: str


@dataclass(frozen=True)
class Structured:
    """Model reply that parsed as a JSON value."""

    value: Any


ModelResult = Union[Text, Structured]


@dataclass(frozen=True)
class OutputRecord:
    file: str
    response: ModelResult


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    UNREADABLE = "unreadable"
    UNSUPPORTED_FORMAT = "unsupported_format"
    REQUEST_FAILED = "request_failed"


def printable_path(path: str) -> str:
    """Path safe to write to any text stream; undecodable bytes become escapes."""
    return path.encode("utf-8", "backslashreplace").decode("utf-8")


@dataclass(frozen=True)
class ItemFailure:
    """Why a single candidate was skipped."""

    path: str
    kind: FailureKind
    detail: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {printable_path(self.path)}: {self.detail}"


@dataclass(frozen=True)
class ValidationIssue:
    """Dry-run finding; reason is NOT_FOUND or UNREADABLE."""

    path: str
    reason: FailureKind
    detail: str = ""


@dataclass
class RunSummary:
    seen: int = 0
    emitted: int = 0
    skipped: int = 0
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def load_prompt_config(path: str | Path) -> PromptConfig:
    """Read and validate the prompt file; any problem raises ConfigError."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read prompt file '{path}': {e}") from e
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ConfigError(f"failed to parse prompt file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"prompt file '{path}' must contain a JSON object")
    try:
        cfg = PromptConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"invalid prompt file '{path}': {problems}") from e
    logger.debug("loaded prompt config temperature=%s model=%s", cfg.temperature, cfg.model)
    return cfg


# Parsing helpers
def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


def parse_model_output(text: str) -> ModelResult:
    """Tag a model reply: JSON (optionally inside one code fence) is Structured, anything else Text."""
    stripped = text.strip()
    m = _FENCE.match(stripped)
    candidate = m.group(1).strip() if m else stripped
    if candidate:
        try:
            return Structured(json.loads(candidate, parse_constant=_reject_constant))
        except ValueError:
            pass
    return Text(text)
