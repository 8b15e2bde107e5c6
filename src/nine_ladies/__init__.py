"""nine_ladies package

High-level goal: read image paths, send each image with a fixed prompt to a
vision-language model server, and write one JSON line per described image.

Public entry points kept minimal. Most users interact through the CLI (`nine-ladies`).
"""
from .errors import ConfigError, NineLadiesError, RequestFailed
from .schemas import (  # re-export core models
    OutputRecord,
    PromptConfig,
    Structured,
    Text,
    ValidatedImage,
    load_prompt_config,
)
from .sniff import ImageFormat, sniff_format

__all__ = [
    "ConfigError",
    "NineLadiesError",
    "RequestFailed",
    "OutputRecord",
    "PromptConfig",
    "Structured",
    "Text",
    "ValidatedImage",
    "load_prompt_config",
    "ImageFormat",
    "sniff_format",
]
