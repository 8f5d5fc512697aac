"""Concurrent analysis of a batch of alerts."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from datetime import timedelta

from ..contracts.alert import (
    AlertFailure,
    AlertOutcome,
    AlertRecord,
    AlertSuccess,
    BatchResult,
)
from ..contracts.report import AnalysisResult
from ..errors import AlertValidationError, CollectionError, ModelError
from ..storage import ReportStore
from .analyzer import Analyzer
from .types import AnalysisTarget, Deadline

LOGGER = logging.getLogger(__name__)

MISSING_LABELS = "missing namespace or pod in alert labels"
DEADLINE_EXCEEDED = "analysis deadline exceeded"


def validate_alert(alert: AlertRecord) -> None:
    if not alert.namespace or not alert.pod_name:
        raise AlertValidationError(MISSING_LABELS)


def target_for_alert(alert: AlertRecord, lookback: timedelta) -> AnalysisTarget:
    """Return the ``AnalysisTarget`` named by ``alert``'s labels."""

    validate_alert(alert)
    return AnalysisTarget(
        namespace=alert.namespace,
        pod_name=alert.pod_name,
        lookback=lookback,
        alert_fingerprint=alert.fingerprint or None,
    )


class BatchCoordinator:
    """Analyze many alerts at once, isolating each alert's failure."""

    def __init__(
        self,
        analyzer: Analyzer,
        *,
        store: ReportStore | None = None,
        max_parallel: int = 0,
    ) -> None:
        self.analyzer = analyzer
        self.store = store
        self.max_parallel = max_parallel

    def _save(self, result: AnalysisResult) -> None:
        if self.store is None:
            return
        try:
            self.store.save(result)
        except Exception:
            # a lost record must not turn a finished analysis into a failure
            LOGGER.exception(
                "failed to save analysis for %s/%s",
                result.alert.namespace,
                result.alert.pod,
            )

    async def _analyze_alert(
        self,
        alert: AlertRecord,
        target: AnalysisTarget,
        deadline: Deadline,
        limiter: asyncio.Semaphore | None,
    ) -> AlertOutcome:
        alert_name = alert.alert_name
        async with limiter or contextlib.nullcontext():
            try:
                result = await asyncio.wait_for(
                    asyncio.to_thread(self.analyzer.run, target, deadline, alert=alert),
                    timeout=deadline.remaining(),
                )
            except TimeoutError:
                LOGGER.error(
                    "alert analysis timed out alert_name=%s namespace=%s pod=%s",
                    alert_name,
                    target.namespace,
                    target.pod_name,
                )
                return AlertFailure(
                    fingerprint=alert.fingerprint,
                    alert_name=alert_name,
                    reason=DEADLINE_EXCEEDED,
                )
            except (CollectionError, ModelError) as exc:
                LOGGER.error(
                    "alert analysis failed alert_name=%s namespace=%s pod=%s: %s",
                    alert_name,
                    target.namespace,
                    target.pod_name,
                    exc,
                )
                return AlertFailure(
                    fingerprint=alert.fingerprint, alert_name=alert_name, reason=str(exc)
                )
            except Exception as exc:
                LOGGER.exception("unexpected failure analyzing alert %s", alert_name)
                return AlertFailure(
                    fingerprint=alert.fingerprint,
                    alert_name=alert_name,
                    reason=str(exc) or type(exc).__name__,
                )

        self._save(result)
        LOGGER.info(
            "alert analysis completed alert_name=%s root_cause=%s",
            alert_name,
            result.analysis.root_cause,
        )
        return AlertSuccess(
            fingerprint=alert.fingerprint,
            alert_name=alert_name,
            namespace=target.namespace,
            pod=target.pod_name,
            severity=alert.severity,
            status=alert.status,
            report=result.analysis,
            collected_data=result.collected_data,
        )

    async def process_batch(
        self,
        alerts: Sequence[AlertRecord],
        lookback: timedelta,
        timeout: float | timedelta = timedelta(minutes=5),
    ) -> BatchResult:
        """Analyze ``alerts`` concurrently and return every alert's outcome.

        ``timeout`` bounds the whole batch, not each alert. Alerts without a
        namespace or pod fail immediately and launch no work.
        """

        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        deadline = Deadline.after(timeout)
        limiter = asyncio.Semaphore(self.max_parallel) if self.max_parallel > 0 else None

        rejected: list[AlertOutcome] = []
        tasks: list[asyncio.Task[AlertOutcome]] = []
        for alert in alerts:
            try:
                target = target_for_alert(alert, lookback)
            except AlertValidationError as exc:
                LOGGER.warning(
                    "skipping alert without namespace or pod alert_name=%s fingerprint=%s",
                    alert.alert_name,
                    alert.fingerprint,
                )
                rejected.append(
                    AlertFailure(
                        fingerprint=alert.fingerprint,
                        alert_name=alert.alert_name,
                        reason=str(exc),
                    )
                )
                continue
            tasks.append(
                asyncio.create_task(
                    self._analyze_alert(alert, target, deadline, limiter)
                )
            )

        LOGGER.info(
            "analyzing %d of %d alert(s) (timeout %.0fs)",
            len(tasks),
            len(alerts),
            timeout,
        )
        completed = await asyncio.gather(*tasks)
        result = BatchResult.from_outcomes(len(alerts), [*rejected, *completed])
        LOGGER.info(
            "batch finished: received=%d analyzed=%d failed=%d",
            result.received_count,
            result.analyzed_count,
            result.failed_count,
        )
        return result

    def process_batch_sync(
        self,
        alerts: Sequence[AlertRecord],
        lookback: timedelta,
        timeout: float | timedelta = timedelta(minutes=5),
    ) -> BatchResult:
        """Run :meth:`process_batch` on a fresh event loop."""

        return asyncio.run(self.process_batch(alerts, lookback, timeout))


__all__ = [
    "BatchCoordinator",
    "DEADLINE_EXCEEDED",
    "MISSING_LABELS",
    "target_for_alert",
    "validate_alert",
]
