from __future__ import annotations
import logging
import os
from typing import Any, Dict, List, Optional, Protocol

import requests

log = logging.getLogger(__name__)

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4").strip()
OPENAI_ENDPOINT = os.getenv("OPENAI_ENDPOINT", "https://api.openai.com/v1/chat/completions").strip()

try:
    TEMPERATURE = float(os.getenv("TEMPERATURE", "0.7"))
except Exception:
    TEMPERATURE = 0.7

# No upstream timeout existed originally; keep one so a stuck call frees its worker
try:
    LLM_TIMEOUT_SECS = int(os.getenv("LLM_TIMEOUT_SECS", "120"))
except Exception:
    LLM_TIMEOUT_SECS = 120


class LLMError(RuntimeError):
    """Raised when the chat-completion call cannot produce reply text."""


class ChatClient(Protocol):
    def complete(self, messages: List[Dict[str, str]]) -> str:
        ...


class OpenAIChatClient:
    """Blocking client for an OpenAI-compatible chat completions endpoint.

    One request per call, first choice only, no retries. Any transport,
    HTTP or envelope problem surfaces as LLMError.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4",
        temperature: float = 0.7,
        endpoint: str = "https://api.openai.com/v1/chat/completions",
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.model = model
        self.temperature = temperature
        self.endpoint = endpoint
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "OpenAIChatClient":
        return cls(
            api_key=OPENAI_API_KEY,
            model=OPENAI_MODEL,
            temperature=TEMPERATURE,
            endpoint=OPENAI_ENDPOINT,
            timeout=LLM_TIMEOUT_SECS,
        )

    @property
    def has_token(self) -> bool:
        return bool(self.api_key)

    def complete(self, messages: List[Dict[str, str]]) -> str:
        if not self.api_key:
            raise LLMError("Missing OPENAI_API_KEY")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        try:
            resp = requests.post(self.endpoint, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise LLMError(f"request error: {e!r}") from e

        if resp.status_code != 200:
            try:
                msg = resp.text[:400]
            except Exception:
                msg = ""
            raise LLMError(f"HTTP {resp.status_code}: {msg}")

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("non-JSON HTTP body") from e

        text = _first_choice_text(data)
        if text is None:
            raise LLMError("missing response text")
        log.debug("llm reply model=%s chars=%d", self.model, len(text))
        return text

    def status(self) -> Dict[str, Any]:
        return {
            "provider": "openai",
            "model": self.model,
            "has_token": self.has_token,
            "endpoint": self.endpoint,
        }


def _first_choice_text(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    text = message.get("content")
    if not isinstance(text, str):
        return None
    return text
