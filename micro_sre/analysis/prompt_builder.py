"""Build deterministic prompts for pod root cause analysis."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from ..contracts.report import LlmReport
from .types import AnalysisTarget, CollectedEvidence, EventRecord, Prompt

MAX_EVENTS = 10
DEFAULT_MAX_LOG_CHARS = 5000
TRUNCATION_MARKER = "\n... (truncated)"

_GUARDRAILS = (
    "You are an expert SRE analyzing a Kubernetes incident. "
    "Analyze the following data and provide a detailed root cause analysis."
)

_TASK = """TASK:
1. Identify the root cause of the issue
2. Provide a confidence level (high/medium/low)
3. Explain your reasoning
4. Create a timeline of key events
5. Extract relevant evidence (log lines, events)
6. Provide actionable recommendations with specific commands

Please respond in JSON format with the following structure:
{
  "root_cause": "brief description",
  "confidence": "high|medium|low",
  "reasoning": "detailed explanation",
  "timeline": [{"timestamp": "...", "event": "...", "details": "..."}],
  "evidence": {
    "logs": [{"timestamp": "...", "line": "..."}],
    "events": [{"type": "...", "reason": "...", "message": "..."}]
  },
  "recommendations": [
    {"priority": "high|medium|low", "action": "...", "details": "...", "command": "..."}
  ]
}"""

_EPOCH = datetime.min.replace(tzinfo=UTC)


def format_duration(value: timedelta) -> str:
    """Render a ``timedelta`` the way operators write lookbacks (``1h30m0s``)."""

    total = int(value.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{minutes}m{seconds}s"
    return f"{seconds}s"


def truncate_logs(logs: str, max_chars: int = DEFAULT_MAX_LOG_CHARS) -> str:
    """Keep the last ``max_chars`` characters of ``logs``."""

    if len(logs) <= max_chars:
        return logs
    return logs[len(logs) - max_chars :] + TRUNCATION_MARKER


def _event_key(event: EventRecord) -> datetime:
    ts = event.timestamp
    if ts is None:
        return _EPOCH
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts


def format_events(events: Sequence[EventRecord], limit: int = MAX_EVENTS) -> str:
    """Return the ``limit`` most recent events, oldest first, one per line."""

    if not events:
        return "No recent events found"
    recent = sorted(events, key=_event_key)[-limit:]
    lines = []
    for event in recent:
        ts = event.timestamp.isoformat() if event.timestamp else "unknown"
        lines.append(
            f"- [{ts}] {event.type}: {event.message} (reason: {event.reason})"
        )
    return "\n".join(lines)


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def build_prompt(
    target: AnalysisTarget,
    evidence: CollectedEvidence,
    *,
    max_log_chars: int = DEFAULT_MAX_LOG_CHARS,
) -> Prompt:
    """Return a deterministic prompt for ``target`` given its ``evidence``.

    The JSON schema is returned separately to allow programmatic validation
    of LLM responses.
    """

    pod = evidence.pod_snapshot
    status = pod.get("status") or {}
    containers = (pod.get("spec") or {}).get("containers") or [{}]
    first = containers[0]

    text = (
        f"{_GUARDRAILS}\n\n"
        "ALERT CONTEXT:\n"
        f"- Namespace: {target.namespace}\n"
        f"- Pod: {target.pod_name}\n"
        f"- Time Range: Last {format_duration(target.lookback)}\n\n"
        "POD STATUS:\n"
        f"Phase: {status.get('phase', 'Unknown')}\n"
        f"Conditions: {_dump(status.get('conditions') or [])}\n"
        f"Container Statuses: {_dump(status.get('containerStatuses') or [])}\n\n"
        "POD CONFIGURATION:\n"
        f"Resources: {_dump(first.get('resources') or {})}\n"
        f"Image: {first.get('image', '')}\n\n"
        "RECENT EVENTS:\n"
        f"{format_events(evidence.events)}\n\n"
        "POD LOGS:\n"
        f"{truncate_logs(evidence.log_text, max_log_chars)}\n\n"
        f"{_TASK}"
    )
    return Prompt(text=text, schema=LlmReport.model_json_schema())


__all__ = [
    "DEFAULT_MAX_LOG_CHARS",
    "MAX_EVENTS",
    "build_prompt",
    "format_duration",
    "format_events",
    "truncate_logs",
]
