"""Model backends.

Every backend exposes ``infer(image, config, model=None) -> ModelResult`` and
raises ``RequestFailed`` for any failure. Two families are provided:

- ``chat``: OpenAI-compatible ``/v1/chat/completions`` through the openai SDK.
- ``completion``: llama.cpp style ``/completion`` taking base64 ``image_data``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Protocol, cast

import openai
import requests
from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)

from .errors import RequestFailed
from .logging import get_logger
from .schemas import ModelResult, PromptConfig, ValidatedImage, parse_model_output
from .utils.clients import DEFAULT_MODEL, AIClient
from .utils.images import image_b64, image_part

logger = get_logger(__name__)

__all__ = ["ModelClient", "ChatClient", "CompletionClient", "BACKENDS", "create_client"]


class ModelClient(Protocol):
    def infer(
        self, image: ValidatedImage, config: PromptConfig, model: str | None = None
    ) -> ModelResult:
        ...


def _resolve_model(override: str | None, config: PromptConfig, default: str) -> str:
    return override or config.model or default


class ChatClient:
    """Chat-style backend: system message plus an image and text user message."""

    def __init__(
        self,
        url: str,
        model: str | None = None,
        api_key: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        self.ai = AIClient(base_url=url, model=model or DEFAULT_MODEL, api_key=api_key, timeout=timeout)

    def infer(
        self, image: ValidatedImage, config: PromptConfig, model: str | None = None
    ) -> ModelResult:
        system_msg: ChatCompletionSystemMessageParam = {"role": "system", "content": config.system}
        parts: list[dict] = [image_part(image), {"type": "text", "text": config.prompt}]
        # content must be a list of content parts for user messages in 1.x SDK
        user_msg: ChatCompletionUserMessageParam = {
            "role": "user",
            "content": cast(Any, parts),
        }
        messages: List[ChatCompletionMessageParam] = [system_msg, user_msg]
        try:
            resp = self.ai.client.chat.completions.create(
                model=_resolve_model(model, config, self.ai.model),
                messages=messages,
                temperature=config.temperature,
            )
        except openai.OpenAIError as e:
            raise RequestFailed(f"request failed: {e}") from e
        try:
            content = resp.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise RequestFailed(f"malformed chat response: {e}") from e
        return parse_model_output(content)


class CompletionClient:
    """Completion-style backend (llama.cpp ``/completion`` with ``image_data``)."""

    PROMPT_TEMPLATE = "{system}\nUSER:[img-{image_id}]{prompt}\nASSISTANT:"

    def __init__(
        self,
        url: str,
        model: str | None = None,
        api_key: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        self.endpoint = f"{url.rstrip('/')}/completion"
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self._session.headers["Authorization"] = f"Bearer {api_key}"

    def build_payload(
        self, image: ValidatedImage, config: PromptConfig, model: str | None = None
    ) -> Dict[str, Any]:
        return {
            "prompt": self.PROMPT_TEMPLATE.format(system=config.system, image_id=1, prompt=config.prompt),
            "image_data": [{"data": image_b64(image), "id": 1}],
            "temperature": config.temperature,
            "model": _resolve_model(model, config, self.model),
            "stream": False,
        }

    def infer(
        self, image: ValidatedImage, config: PromptConfig, model: str | None = None
    ) -> ModelResult:
        payload = self.build_payload(image, config, model)
        try:
            with self._session.post(self.endpoint, json=payload, timeout=self.timeout) as response:
                if not response.ok:
                    raise RequestFailed(f"server returned {response.status_code}: {response.text}")
                body = response.json()
        except requests.exceptions.RequestException as e:
            raise RequestFailed(f"request failed: {e}") from e
        except ValueError as e:
            raise RequestFailed(f"failed to parse response: {e}") from e
        content = body.get("content") if isinstance(body, dict) else None
        if not isinstance(content, str):
            raise RequestFailed("malformed completion response: missing 'content'")
        return parse_model_output(content)


BACKENDS = {
    "chat": ChatClient,
    "completion": CompletionClient,
}


def create_client(
    backend: str,
    url: str,
    model: str | None = None,
    api_key: str | None = None,
    timeout: float = 120.0,
) -> ModelClient:
    """Build the backend adapter named by ``backend``."""
    key = (backend or "").strip().lower()
    if key not in BACKENDS:
        raise ValueError(f"unsupported backend: {backend!r} (choose from {', '.join(sorted(BACKENDS))})")
    logger.debug("using %s backend at %s", key, url)
    return BACKENDS[key](url, model=model, api_key=api_key, timeout=timeout)
