"""Single-target root cause analysis."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from ..collectors.base import Collector
from ..contracts.alert import AlertRecord
from ..contracts.report import (
    AlertSummary,
    AnalysisResult,
    CollectedDataSummary,
    IncidentReport,
)
from ..errors import CollectionError, EmptyResponse, ModelError
from ..llm.base import LLM
from .parse import normalize_reply
from .prompt_builder import DEFAULT_MAX_LOG_CHARS, build_prompt, format_duration
from .types import AnalysisTarget, CollectedEvidence, Deadline

LOGGER = logging.getLogger(__name__)


class Analyzer:
    """Collect evidence for one pod, ask the LLM and normalize its reply."""

    def __init__(
        self,
        collector: Collector,
        llm: LLM,
        *,
        max_log_chars: int = DEFAULT_MAX_LOG_CHARS,
        collect_timeout: float = 60.0,
        llm_timeout: float = 300.0,
    ) -> None:
        self.collector = collector
        self.llm = llm
        self.max_log_chars = max_log_chars
        self.collect_timeout = collect_timeout
        self.llm_timeout = llm_timeout

    def _collect(self, target: AnalysisTarget, deadline: Deadline) -> CollectedEvidence:
        if deadline.expired:
            raise CollectionError("failed to collect data: deadline exceeded")
        try:
            return self.collector.fetch_evidence(
                target.namespace,
                target.pod_name,
                target.lookback,
                timeout=min(deadline.remaining(), self.collect_timeout),
            )
        except CollectionError:
            raise
        except Exception as exc:
            raise CollectionError(f"failed to collect data: {exc}") from exc

    def _complete(self, prompt: str, deadline: Deadline) -> str:
        if deadline.expired:
            raise ModelError("LLM analysis failed: deadline exceeded")
        try:
            text = self.llm.generate(
                prompt, timeout=min(deadline.remaining(), self.llm_timeout)
            )
        except ModelError:
            raise
        except Exception as exc:
            raise ModelError(f"LLM analysis failed: {exc}") from exc
        if not text or not text.strip():
            raise EmptyResponse("LLM analysis failed: empty completion")
        return text

    def run(
        self,
        target: AnalysisTarget,
        deadline: Deadline | None = None,
        *,
        alert: AlertRecord | None = None,
    ) -> AnalysisResult:
        """Analyze ``target`` and wrap the report with what it is about.

        Raises ``CollectionError`` if the pod cannot be read and
        ``ModelError`` if the LLM call fails; the model is never called when
        collection failed.
        """

        deadline = deadline or Deadline.never()
        LOGGER.info(
            "starting alert analysis namespace=%s pod=%s lookback=%s",
            target.namespace,
            target.pod_name,
            format_duration(target.lookback),
        )
        evidence = self._collect(target, deadline)
        prompt = build_prompt(target, evidence, max_log_chars=self.max_log_chars)
        LOGGER.info("sending data to LLM for analysis")
        raw = self._complete(prompt.text, deadline)
        LOGGER.debug("LLM response for %s/%s: %s", target.namespace, target.pod_name, raw)
        report = normalize_reply(raw)
        LOGGER.info(
            "analysis completed root_cause=%s confidence=%s",
            report.root_cause,
            report.confidence,
        )

        started_at = datetime.now(UTC) - target.lookback
        if alert is not None and alert.starts_at is not None:
            started_at = alert.starts_at
        summary = AlertSummary(
            name=alert.alert_name if alert is not None else "PodIncident",
            severity=alert.severity if alert is not None else "unknown",
            namespace=target.namespace,
            pod=target.pod_name,
            started_at=started_at,
        )
        collected = CollectedDataSummary(
            log_chars=len(evidence.log_text),
            events_count=len(evidence.events),
            time_range=format_duration(target.lookback),
        )
        return AnalysisResult(alert=summary, analysis=report, collected_data=collected)

    def analyze(
        self, target: AnalysisTarget, deadline: Deadline | None = None
    ) -> IncidentReport:
        """Return the ``IncidentReport`` for ``target``; see :meth:`run`."""

        return self.run(target, deadline).analysis


__all__ = ["Analyzer"]
