"""OpenAI chat completions adapter."""

from __future__ import annotations

import os
from typing import Any

from ..errors import ConfigError, EmptyResponse
from ._http import post_json
from .base import LLM

_API_URL = "https://api.openai.com/v1/chat/completions"


class OpenAI(LLM):
    """LLM adapter using OpenAI's chat completions endpoint."""

    def __init__(
        self,
        model: str = "gpt-4o",
        *,
        api_key: str | None = None,
        project_id: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ) -> None:
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigError("OPENAI_API_KEY is not set")
        self.project_id = project_id or os.getenv("OPENAI_PROJECT_ID")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def generate(self, prompt: str, *, timeout: float) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.project_id:
            headers["OpenAI-Project"] = self.project_id
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        data = post_json(
            _API_URL,
            headers=headers,
            payload=payload,
            timeout=timeout,
            provider="openai",
        )
        choices = data.get("choices") or []
        if not choices:
            raise EmptyResponse("empty response from OpenAI")
        text = (choices[0].get("message") or {}).get("content")
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponse("empty response from OpenAI")
        return text


__all__ = ["OpenAI"]
