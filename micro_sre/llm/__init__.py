"""LLM adapter implementations and factory."""

from __future__ import annotations

import logging

from ..config import LLMConfig
from ..errors import ConfigError
from .anthropic import Anthropic
from .base import LLM
from .mock import MockLLM
from .openai import OpenAI

LOGGER = logging.getLogger(__name__)


def create_llm(settings: LLMConfig | None = None, backend: str | None = None) -> LLM:
    """Return an ``LLM`` instance for ``backend`` or the configured provider.

    Falls back to :class:`MockLLM` when no API key is available.
    """

    settings = settings or LLMConfig()
    backend = (backend or settings.provider).lower()
    if backend == "mock":
        return MockLLM()
    if backend not in {"anthropic", "openai"}:
        raise ConfigError(f"unknown LLM provider: {backend}")
    try:
        if backend == "openai":
            return OpenAI(
                settings.model,
                api_key=settings.api_key or None,
                max_tokens=settings.max_tokens,
                temperature=settings.temperature,
            )
        return Anthropic(
            settings.model,
            api_key=settings.api_key or None,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )
    except ConfigError:
        LOGGER.warning("no API key for %s, using mock LLM", backend)
        return MockLLM()


__all__ = ["LLM", "Anthropic", "MockLLM", "OpenAI", "create_llm"]
