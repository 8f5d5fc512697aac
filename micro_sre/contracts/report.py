"""Incident report contracts: the LLM wire schema and the canonical report."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

UNPARSED_ROOT_CAUSE = "Unable to parse LLM response"


def _none_to_empty_str(value: Any) -> Any:
    return "" if value is None else value


def _none_to_empty_list(value: Any) -> Any:
    return [] if value is None else value


WireStr = Annotated[str, BeforeValidator(_none_to_empty_str)]


class Confidence(StrEnum):
    """Closed set of confidence levels understood by consumers."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


# -- wire schema -------------------------------------------------------------
#
# Every field defaults to its zero value: a reply that omits a field is still
# a valid reply. Only a structurally wrong value fails validation.


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore")


class WireTimelineEntry(_Wire):
    timestamp: WireStr = Field("", description="When the event happened")
    event: WireStr = Field("", description="Short name of the event")
    details: WireStr = Field("", description="What happened")


class WireLogEntry(_Wire):
    timestamp: WireStr = Field("", description="Timestamp of the log line")
    line: WireStr = Field("", description="The log line itself")
    container: WireStr = Field("", description="Container that emitted the line")


class WireEventEntry(_Wire):
    type: WireStr = Field("", description="Kubernetes event type")
    reason: WireStr = Field("", description="Kubernetes event reason")
    message: WireStr = Field("", description="Kubernetes event message")
    timestamp: WireStr = Field("", description="Timestamp of the event")


class WireEvidence(_Wire):
    logs: Annotated[
        list[WireLogEntry], BeforeValidator(_none_to_empty_list)
    ] = Field(default_factory=list)
    events: Annotated[
        list[WireEventEntry], BeforeValidator(_none_to_empty_list)
    ] = Field(default_factory=list)


class WireRecommendation(_Wire):
    priority: WireStr = Field("", description="high, medium or low")
    action: WireStr = Field("", description="What to do")
    details: WireStr = Field("", description="Why and how")
    command: WireStr = Field("", description="Command to run, if any")


class LlmReport(_Wire):
    """Root cause analysis as returned by the language model."""

    root_cause: WireStr = Field("", description="Brief description of the cause")
    confidence: WireStr = Field("", description="high, medium or low")
    reasoning: WireStr = Field("", description="Detailed explanation")
    timeline: Annotated[
        list[WireTimelineEntry], BeforeValidator(_none_to_empty_list)
    ] = Field(default_factory=list)
    evidence: Annotated[
        WireEvidence, BeforeValidator(lambda v: {} if v is None else v)
    ] = Field(default_factory=WireEvidence)
    recommendations: Annotated[
        list[WireRecommendation], BeforeValidator(_none_to_empty_list)
    ] = Field(default_factory=list)


# -- canonical report --------------------------------------------------------


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TimelineEntry(_Frozen):
    timestamp: datetime
    event: str
    details: str


class LogEvidence(_Frozen):
    timestamp: datetime
    line: str
    container: str | None = None


class EventEvidence(_Frozen):
    type: str
    reason: str
    message: str
    timestamp: datetime


class Recommendation(_Frozen):
    priority: str
    action: str
    details: str | None = None
    command: str | None = None


class IncidentReport(_Frozen):
    """Canonical, model-independent incident report.

    Sequence fields are always present; they are empty rather than missing
    when the model said nothing about them.
    """

    root_cause: str
    confidence: str
    reasoning: str
    timeline: tuple[TimelineEntry, ...] = ()
    evidence_logs: tuple[LogEvidence, ...] = ()
    evidence_events: tuple[EventEvidence, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()

    @classmethod
    def unparsed(cls, raw_text: str) -> IncidentReport:
        """Return the report used when ``raw_text`` holds no usable JSON."""

        return cls(
            root_cause=UNPARSED_ROOT_CAUSE,
            confidence=Confidence.UNKNOWN.value,
            reasoning=raw_text,
        )

    @property
    def is_unparsed(self) -> bool:
        return self.root_cause == UNPARSED_ROOT_CAUSE

    @property
    def display_confidence(self) -> Confidence:
        """Confidence folded into the closed set; unknown values become UNKNOWN."""

        try:
            return Confidence(self.confidence.lower())
        except ValueError:
            return Confidence.UNKNOWN


# -- persisted envelope ------------------------------------------------------


class AlertSummary(_Frozen):
    name: str
    severity: str
    namespace: str
    pod: str
    started_at: datetime


class CollectedDataSummary(_Frozen):
    log_chars: int
    events_count: int
    time_range: str


class AnalysisResult(_Frozen):
    """A finished analysis together with what it was about."""

    alert: AlertSummary
    analysis: IncidentReport
    collected_data: CollectedDataSummary

    @property
    def store_key(self) -> tuple[str, str, str]:
        return (
            self.alert.namespace,
            self.alert.pod,
            self.alert.started_at.isoformat(),
        )


__all__ = [
    "AlertSummary",
    "AnalysisResult",
    "CollectedDataSummary",
    "Confidence",
    "EventEvidence",
    "IncidentReport",
    "LlmReport",
    "LogEvidence",
    "Recommendation",
    "TimelineEntry",
    "UNPARSED_ROOT_CAUSE",
    "WireEventEntry",
    "WireEvidence",
    "WireLogEntry",
    "WireRecommendation",
    "WireTimelineEntry",
]
