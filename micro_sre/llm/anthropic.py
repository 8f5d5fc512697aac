"""Anthropic messages API adapter."""

from __future__ import annotations

import os
from typing import Any

from ..errors import ConfigError, EmptyResponse, ProviderError
from ._http import post_json
from .base import LLM

_API_URL = "https://api.anthropic.com/v1/messages"
_API_VERSION = "2023-06-01"


class Anthropic(LLM):
    """LLM adapter using Anthropic's messages endpoint."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-5",
        *,
        api_key: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ) -> None:
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ConfigError("anthropic API key not configured")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def generate(self, prompt: str, *, timeout: float) -> str:
        headers = {
            "x-api-key": str(self.api_key),
            "anthropic-version": _API_VERSION,
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        data = post_json(
            _API_URL,
            headers=headers,
            payload=payload,
            timeout=timeout,
            provider="anthropic",
        )
        content = data.get("content") or []
        if not content:
            raise EmptyResponse("empty response from Anthropic")
        block = content[0]
        if block.get("type") != "text":
            raise ProviderError("unexpected response format from Anthropic")
        text = block.get("text")
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponse("empty response from Anthropic")
        return text


__all__ = ["Anthropic"]
