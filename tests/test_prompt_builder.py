from datetime import UTC, datetime, timedelta
from typing import Any

from micro_sre.analysis.prompt_builder import (
    TRUNCATION_MARKER,
    build_prompt,
    format_duration,
    format_events,
    truncate_logs,
)
from micro_sre.analysis.types import AnalysisTarget, CollectedEvidence, EventRecord


def _pod() -> dict[str, Any]:
    return {
        "metadata": {"name": "api-0", "namespace": "prod"},
        "spec": {
            "containers": [
                {
                    "name": "api",
                    "image": "registry.local/api:1.2.3",
                    "resources": {"limits": {"memory": "256Mi"}},
                },
                {"name": "sidecar", "image": "envoy:latest"},
            ]
        },
        "status": {
            "phase": "Running",
            "conditions": [{"type": "Ready", "status": "False"}],
            "containerStatuses": [{"name": "api", "restartCount": 7}],
        },
    }


def _event(minute: int, reason: str = "BackOff") -> EventRecord:
    return EventRecord(
        type="Warning",
        reason=reason,
        message=f"event {minute}",
        timestamp=datetime(2024, 1, 1, 0, minute, tzinfo=UTC),
    )


def test_format_duration() -> None:
    assert format_duration(timedelta(hours=1)) == "1h0m0s"
    assert format_duration(timedelta(minutes=30)) == "30m0s"
    assert format_duration(timedelta(seconds=45)) == "45s"
    assert format_duration(timedelta(hours=2, minutes=5, seconds=1)) == "2h5m1s"


def test_truncate_logs_keeps_tail() -> None:
    logs = "a" * 10 + "b" * 5
    out = truncate_logs(logs, 5)
    assert out == "bbbbb" + TRUNCATION_MARKER
    assert truncate_logs("short", 5) == "short"


def test_format_events_empty() -> None:
    assert format_events([]) == "No recent events found"


def test_format_events_keeps_most_recent_in_order() -> None:
    events = [_event(m) for m in (14, 3, 7, 0, 11, 1, 2, 4, 5, 6, 8, 9, 10, 12, 13)]
    text = format_events(events)
    lines = text.splitlines()
    assert len(lines) == 10
    assert lines[0].startswith("- [2024-01-01T00:05:00+00:00] Warning: event 5")
    assert lines[-1].endswith("event 14 (reason: BackOff)")


def test_format_events_without_timestamp() -> None:
    event = EventRecord(type="Normal", reason="Pulled", message="pulled image")
    assert format_events([event]) == (
        "- [unknown] Normal: pulled image (reason: Pulled)"
    )


def test_build_prompt_sections() -> None:
    target = AnalysisTarget("prod", "api-0", timedelta(hours=1))
    evidence = CollectedEvidence(
        pod_snapshot=_pod(),
        log_text="line one\nline two",
        events=(_event(1, "OOMKilling"),),
    )
    prompt = build_prompt(target, evidence)
    text = prompt.text
    headings = [
        "ALERT CONTEXT:",
        "POD STATUS:",
        "POD CONFIGURATION:",
        "RECENT EVENTS:",
        "POD LOGS:",
        "TASK:",
    ]
    positions = [text.index(h) for h in headings]
    assert positions == sorted(positions)
    assert "- Namespace: prod" in text
    assert "- Pod: api-0" in text
    assert "Last 1h0m0s" in text
    assert "Phase: Running" in text
    assert '"restartCount": 7' in text
    assert "Image: registry.local/api:1.2.3" in text
    assert "envoy" not in text
    assert "(reason: OOMKilling)" in text
    assert "line one\nline two" in text
    assert prompt.schema["properties"]["root_cause"]["type"] == "string"


def test_build_prompt_truncates_logs() -> None:
    target = AnalysisTarget("prod", "api-0", timedelta(minutes=5))
    evidence = CollectedEvidence(pod_snapshot=_pod(), log_text="x" * 50 + "TAIL")
    text = build_prompt(target, evidence, max_log_chars=10).text
    assert "xxxxxxTAIL" + TRUNCATION_MARKER in text
    assert "x" * 11 + "TAIL" not in text


def test_build_prompt_handles_sparse_pod() -> None:
    target = AnalysisTarget("prod", "api-0", timedelta(hours=1))
    evidence = CollectedEvidence(pod_snapshot={}, log_text="")
    text = build_prompt(target, evidence).text
    assert "Phase: Unknown" in text
    assert "No recent events found" in text


def test_build_prompt_is_deterministic() -> None:
    target = AnalysisTarget("prod", "api-0", timedelta(hours=1))
    evidence = CollectedEvidence(pod_snapshot=_pod(), log_text="l", events=(_event(2),))
    assert build_prompt(target, evidence) == build_prompt(target, evidence)
