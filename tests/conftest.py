from __future__ import annotations

from datetime import timedelta

import pytest

from micro_sre.analysis.types import CollectedEvidence, EventRecord
from micro_sre.errors import PodNotFoundError


class FakeCollector:
    """Collector returning canned evidence and recording every call."""

    def __init__(
        self,
        evidence: CollectedEvidence | None = None,
        *,
        error: Exception | None = None,
        missing: set[str] | None = None,
    ) -> None:
        self.evidence = evidence or CollectedEvidence(
            pod_snapshot={"status": {"phase": "Running"}},
            log_text="2024-01-01T00:00:00Z boom",
            events=(EventRecord("Warning", "BackOff", "restarting"),),
        )
        self.error = error
        self.missing = missing or set()
        self.calls: list[tuple[str, str, timedelta, float]] = []

    def fetch_evidence(
        self,
        namespace: str,
        pod_name: str,
        lookback: timedelta,
        *,
        timeout: float,
    ) -> CollectedEvidence:
        self.calls.append((namespace, pod_name, lookback, timeout))
        if self.error is not None:
            raise self.error
        if pod_name in self.missing:
            raise PodNotFoundError(f"failed to get pod {namespace}/{pod_name}")
        return self.evidence


class FakeLLM:
    """LLM returning ``reply`` and recording prompts."""

    def __init__(self, reply: str = '{"root_cause": "OOM", "confidence": "high"}'):
        self.reply = reply
        self.prompts: list[str] = []
        self.error: Exception | None = None

    def generate(self, prompt: str, *, timeout: float) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def collector() -> FakeCollector:
    return FakeCollector()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()

