"""Deterministic mock LLM for tests."""

from __future__ import annotations

import json

from .base import LLM

_RESPONSE = {
    "root_cause": "mock root cause",
    "confidence": "medium",
    "reasoning": "mock reasoning",
    "timeline": [
        {
            "timestamp": "2024-01-01T00:00:00Z",
            "event": "mock event",
            "details": "mock details",
        }
    ],
    "evidence": {
        "logs": [{"timestamp": "2024-01-01T00:00:00Z", "line": "mock log line"}],
        "events": [
            {
                "type": "Warning",
                "reason": "BackOff",
                "message": "mock",
                "timestamp": "2024-01-01T00:00:00Z",
            }
        ],
    },
    "recommendations": [
        {
            "priority": "high",
            "action": "mock action",
            "command": "kubectl describe pod",
        }
    ],
}


class MockLLM(LLM):
    """LLM returning a canned response regardless of input."""

    def generate(self, prompt: str, *, timeout: float) -> str:  # noqa: D401
        """Return canned analysis wrapped in prose, ignoring ``prompt``."""

        return "Here is my analysis.\n" + json.dumps(_RESPONSE)


__all__ = ["MockLLM"]
