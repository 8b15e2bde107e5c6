from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv
from openai import OpenAI

load_dotenv()

__all__ = ["AIClient", "chat_base_url", "DEFAULT_MODEL"]

DEFAULT_MODEL = "default"
# llama.cpp and most local servers accept any key, the SDK insists on one
_PLACEHOLDER_KEY = "sk-no-key-required"


def chat_base_url(url: str) -> str:
    """Map a server root such as http://localhost:8080 to its OpenAI-compatible /v1 base."""
    url = url.rstrip("/")
    return url if url.endswith("/v1") else f"{url}/v1"


@dataclass
class AIClient:
    """OpenAI-compatible chat client bound to one server.

    Wraps the OpenAI SDK 1.x client and stores a default model name.
    """

    base_url: str
    model: str = DEFAULT_MODEL
    api_key: str | None = None
    timeout: float = 120.0

    def __post_init__(self) -> None:
        self.client = OpenAI(
            api_key=self.api_key or os.environ.get("NL_API_KEY") or _PLACEHOLDER_KEY,
            base_url=chat_base_url(self.base_url),
            timeout=self.timeout,
            max_retries=0,
        )
