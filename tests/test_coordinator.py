import asyncio
import logging
import threading
import time
from datetime import timedelta
from typing import Any

import pytest

from micro_sre.analysis.analyzer import Analyzer
from micro_sre.analysis.coordinator import (
    DEADLINE_EXCEEDED,
    MISSING_LABELS,
    BatchCoordinator,
    target_for_alert,
    validate_alert,
)
from micro_sre.analysis.types import CollectedEvidence
from micro_sre.contracts.alert import AlertRecord
from micro_sre.contracts.report import AnalysisResult
from micro_sre.errors import AlertValidationError

LOOKBACK = timedelta(hours=1)


def _alert(fingerprint: str, **labels: str) -> AlertRecord:
    return AlertRecord.model_validate(
        {
            "status": "firing",
            "labels": {"alertname": "PodCrashLooping", "severity": "critical", **labels},
            "startsAt": "2024-01-15T10:30:00Z",
            "fingerprint": fingerprint,
        }
    )


class ListStore:
    def __init__(self) -> None:
        self.saved: list[AnalysisResult] = []

    def save(self, result: AnalysisResult) -> None:
        self.saved.append(result)


def test_target_for_alert_uses_fallback_labels() -> None:
    alert = _alert("f", kubernetes_namespace="prod", pod_name="api-0")
    target = target_for_alert(alert, LOOKBACK)
    assert (target.namespace, target.pod_name) == ("prod", "api-0")
    assert target.alert_fingerprint == "f"


@pytest.mark.parametrize("labels", [{"namespace": "prod"}, {"pod": "api-0"}, {}])
def test_target_for_alert_requires_both_labels(labels: dict[str, str]) -> None:
    with pytest.raises(AlertValidationError, match=MISSING_LABELS):
        target_for_alert(_alert("f", **labels), LOOKBACK)


def test_validate_alert_accepts_complete_labels() -> None:
    validate_alert(_alert("f", namespace="prod", pod="api-0"))


def test_alert_without_pod_fails_without_work(collector: Any, llm: Any) -> None:
    alerts = [
        _alert("a1", namespace="prod", pod="api-0"),
        _alert("a2", namespace="prod"),
        _alert("a3", namespace="prod", pod="api-2"),
    ]
    coordinator = BatchCoordinator(Analyzer(collector, llm))
    result = asyncio.run(coordinator.process_batch(alerts, LOOKBACK, 30))

    assert result.received_count == 3
    assert result.failed_count == 1
    assert result.analyzed_count == 2
    failure = result.failures[0]
    assert failure.fingerprint == "a2"
    assert failure.reason == MISSING_LABELS
    assert sorted(call[1] for call in collector.calls) == ["api-0", "api-2"]
    assert len(llm.prompts) == 2


def test_success_outcome_fields(collector: Any, llm: Any) -> None:
    coordinator = BatchCoordinator(Analyzer(collector, llm))
    result = coordinator.process_batch_sync(
        [_alert("a1", namespace="prod", pod="api-0")], LOOKBACK
    )
    success = result.successes[0]
    assert success.kind == "success"
    assert success.fingerprint == "a1"
    assert success.alert_name == "PodCrashLooping"
    assert (success.namespace, success.pod) == ("prod", "api-0")
    assert success.severity == "critical"
    assert success.status == "firing"
    assert success.report.root_cause == "OOM"
    assert success.collected_data is not None


def test_failures_are_isolated(collector: Any, llm: Any) -> None:
    collector.missing = {"gone"}
    alerts = [
        _alert("ok", namespace="prod", pod="api-0"),
        _alert("missing", namespace="prod", pod="gone"),
    ]
    coordinator = BatchCoordinator(Analyzer(collector, llm))
    result = coordinator.process_batch_sync(alerts, LOOKBACK, timedelta(seconds=30))

    assert [s.fingerprint for s in result.successes] == ["ok"]
    assert [f.fingerprint for f in result.failures] == ["missing"]
    assert "prod/gone" in result.failures[0].reason
    assert result.received_count == result.analyzed_count + result.failed_count


def test_empty_batch(collector: Any, llm: Any) -> None:
    result = BatchCoordinator(Analyzer(collector, llm)).process_batch_sync([], LOOKBACK)
    assert (result.received_count, result.analyzed_count, result.failed_count) == (
        0,
        0,
        0,
    )


def test_alerts_run_concurrently(llm: Any) -> None:
    barrier = threading.Barrier(3, timeout=5)

    class BarrierCollector:
        def fetch_evidence(
            self, namespace: str, pod_name: str, lookback: timedelta, *, timeout: float
        ) -> CollectedEvidence:
            barrier.wait()
            return CollectedEvidence(pod_snapshot={}, log_text="")

    alerts = [_alert(str(i), namespace="prod", pod=f"api-{i}") for i in range(3)]
    coordinator = BatchCoordinator(Analyzer(BarrierCollector(), llm))
    result = coordinator.process_batch_sync(alerts, LOOKBACK, 30)
    assert result.analyzed_count == 3


def test_max_parallel_limits_concurrency(llm: Any) -> None:
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}

    class CountingCollector:
        def fetch_evidence(
            self, namespace: str, pod_name: str, lookback: timedelta, *, timeout: float
        ) -> CollectedEvidence:
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.05)
            with lock:
                state["active"] -= 1
            return CollectedEvidence(pod_snapshot={}, log_text="")

    alerts = [_alert(str(i), namespace="prod", pod=f"api-{i}") for i in range(4)]
    coordinator = BatchCoordinator(Analyzer(CountingCollector(), llm), max_parallel=1)
    result = coordinator.process_batch_sync(alerts, LOOKBACK, 30)
    assert result.analyzed_count == 4
    assert state["peak"] == 1


def test_deadline_applies_to_whole_batch(collector: Any, caplog: Any) -> None:
    class SlowLLM:
        def generate(self, prompt: str, *, timeout: float) -> str:
            time.sleep(0.5)
            return '{"root_cause": "late"}'

    caplog.set_level(logging.ERROR)
    alerts = [_alert(str(i), namespace="prod", pod=f"api-{i}") for i in range(2)]
    coordinator = BatchCoordinator(Analyzer(collector, SlowLLM()))
    result = coordinator.process_batch_sync(alerts, LOOKBACK, 0.1)

    assert result.received_count == 2
    assert result.failed_count == 2
    assert {f.reason for f in result.failures} == {DEADLINE_EXCEEDED}
    assert "timed out" in caplog.text


def test_unexpected_errors_become_failures(caplog: Any) -> None:
    class BrokenAnalyzer:
        def run(self, target: Any, deadline: Any = None, *, alert: Any = None) -> Any:
            raise RuntimeError("kaboom")

    caplog.set_level(logging.ERROR)
    coordinator = BatchCoordinator(BrokenAnalyzer())  # type: ignore[arg-type]
    result = coordinator.process_batch_sync(
        [_alert("x", namespace="prod", pod="api-0")], LOOKBACK
    )
    assert result.failures[0].reason == "kaboom"
    assert "unexpected failure analyzing alert" in caplog.text


def test_successes_are_stored(collector: Any, llm: Any) -> None:
    store = ListStore()
    alerts = [
        _alert("a1", namespace="prod", pod="api-0"),
        _alert("a2", namespace="prod", pod="api-1"),
        _alert("bad", namespace="prod"),
    ]
    coordinator = BatchCoordinator(Analyzer(collector, llm), store=store)
    coordinator.process_batch_sync(alerts, LOOKBACK)
    assert sorted(r.alert.pod for r in store.saved) == ["api-0", "api-1"]


def test_store_failure_does_not_fail_alert(
    collector: Any, llm: Any, caplog: Any
) -> None:
    class BrokenStore:
        def save(self, result: AnalysisResult) -> None:
            raise OSError("disk full")

    caplog.set_level(logging.ERROR)
    coordinator = BatchCoordinator(Analyzer(collector, llm), store=BrokenStore())
    result = coordinator.process_batch_sync(
        [_alert("a1", namespace="prod", pod="api-0")], LOOKBACK
    )
    assert result.analyzed_count == 1
    assert "failed to save analysis for prod/api-0" in caplog.text


def test_batch_logs_summary(collector: Any, llm: Any, caplog: Any) -> None:
    caplog.set_level(logging.INFO)
    coordinator = BatchCoordinator(Analyzer(collector, llm))
    coordinator.process_batch_sync([_alert("a", namespace="prod")], LOOKBACK)
    assert "batch finished: received=1 analyzed=0 failed=1" in caplog.text
