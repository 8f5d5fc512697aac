"""AlertManager alert records and batch outcomes."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from .report import CollectedDataSummary, IncidentReport


def _status_state(value: Any) -> Any:
    # API v2 reports ``{"state": "active", ...}``; webhooks send a plain string.
    if isinstance(value, dict):
        return value.get("state", "")
    return "" if value is None else value


class AlertRecord(BaseModel):
    """A single alert as delivered by AlertManager."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime | None = Field(None, alias="startsAt")
    ends_at: datetime | None = Field(None, alias="endsAt")
    status: Annotated[str, BeforeValidator(_status_state)] = ""
    fingerprint: str = ""

    @property
    def namespace(self) -> str:
        return self.labels.get("namespace") or self.labels.get(
            "kubernetes_namespace", ""
        )

    @property
    def pod_name(self) -> str:
        return self.labels.get("pod") or self.labels.get("pod_name", "")

    @property
    def severity(self) -> str:
        return self.labels.get("severity", "unknown")

    @property
    def alert_name(self) -> str:
        return self.labels.get("alertname", "unknown")

    @property
    def is_firing(self) -> bool:
        return self.status in {"firing", "active"}


class AlertManagerWebhook(BaseModel):
    """Standard AlertManager webhook payload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: str = ""
    group_key: str = Field("", alias="groupKey")
    truncated_alerts: int = Field(0, alias="truncatedAlerts")
    status: str = ""
    receiver: str = ""
    group_labels: dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: dict[str, str] = Field(
        default_factory=dict, alias="commonAnnotations"
    )
    external_url: str = Field("", alias="externalURL")
    alerts: list[AlertRecord] = Field(default_factory=list)


class AlertSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    fingerprint: str
    alert_name: str
    namespace: str
    pod: str
    severity: str
    status: str
    report: IncidentReport
    collected_data: CollectedDataSummary | None = None


class AlertFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    fingerprint: str
    alert_name: str
    reason: str


AlertOutcome = AlertSuccess | AlertFailure


class BatchResult(BaseModel):
    """Aggregate of every alert's fate in one batch."""

    model_config = ConfigDict(frozen=True)

    received_count: int
    analyzed_count: int
    failed_count: int
    successes: tuple[AlertSuccess, ...] = ()
    failures: tuple[AlertFailure, ...] = ()

    @model_validator(mode="after")
    def _check_counts(self) -> BatchResult:
        if self.analyzed_count != len(self.successes):
            raise ValueError("analyzed_count does not match successes")
        if self.failed_count != len(self.failures):
            raise ValueError("failed_count does not match failures")
        if self.received_count != self.analyzed_count + self.failed_count:
            raise ValueError("received_count must equal analyzed + failed")
        return self

    @classmethod
    def from_outcomes(
        cls, received_count: int, outcomes: list[AlertOutcome]
    ) -> BatchResult:
        successes = tuple(o for o in outcomes if isinstance(o, AlertSuccess))
        failures = tuple(o for o in outcomes if isinstance(o, AlertFailure))
        return cls(
            received_count=received_count,
            analyzed_count=len(successes),
            failed_count=len(failures),
            successes=successes,
            failures=failures,
        )


__all__ = [
    "AlertFailure",
    "AlertManagerWebhook",
    "AlertOutcome",
    "AlertRecord",
    "AlertSuccess",
    "BatchResult",
]
