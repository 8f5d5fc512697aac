"""Pydantic contracts for alerts, model replies and incident reports."""

from .alert import (
    AlertFailure,
    AlertManagerWebhook,
    AlertOutcome,
    AlertRecord,
    AlertSuccess,
    BatchResult,
)
from .report import (
    AlertSummary,
    AnalysisResult,
    CollectedDataSummary,
    Confidence,
    EventEvidence,
    IncidentReport,
    LlmReport,
    LogEvidence,
    Recommendation,
    TimelineEntry,
)

__all__ = [
    "AlertFailure",
    "AlertManagerWebhook",
    "AlertOutcome",
    "AlertRecord",
    "AlertSuccess",
    "AlertSummary",
    "AnalysisResult",
    "BatchResult",
    "CollectedDataSummary",
    "Confidence",
    "EventEvidence",
    "IncidentReport",
    "LlmReport",
    "LogEvidence",
    "Recommendation",
    "TimelineEntry",
]
