"""Typed structures for the analysis pipeline."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any


@dataclass(slots=True, frozen=True)
class AnalysisTarget:
    """Pod to analyze and how far back to look."""

    namespace: str
    pod_name: str
    lookback: timedelta
    alert_fingerprint: str | None = None


@dataclass(slots=True, frozen=True)
class EventRecord:
    """A Kubernetes event reduced to the fields the prompt needs."""

    type: str
    reason: str
    message: str
    timestamp: datetime | None = None


@dataclass(slots=True, frozen=True)
class CollectedEvidence:
    """Pod state, logs and events gathered for one target."""

    pod_snapshot: dict[str, Any]
    log_text: str
    events: tuple[EventRecord, ...] = ()


@dataclass(slots=True, frozen=True)
class Prompt:
    """Prompt text and JSON schema to send to an LLM."""

    text: str
    schema: dict[str, Any]


@dataclass(slots=True, frozen=True)
class Deadline:
    """Absolute point on the monotonic clock shared by concurrent analyses."""

    expires_at: float
    clock: Callable[[], float] = field(default=time.monotonic, compare=False)

    @classmethod
    def after(
        cls, seconds: float, *, clock: Callable[[], float] = time.monotonic
    ) -> Deadline:
        return cls(clock() + seconds, clock)

    @classmethod
    def never(cls) -> Deadline:
        return cls(float("inf"))

    def remaining(self) -> float:
        """Seconds left, never negative."""

        return max(self.expires_at - self.clock(), 0.0)

    @property
    def expired(self) -> bool:
        return self.clock() >= self.expires_at


__all__ = [
    "AnalysisTarget",
    "CollectedEvidence",
    "Deadline",
    "EventRecord",
    "Prompt",
]
