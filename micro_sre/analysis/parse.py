"""Parsing utilities for LLM responses."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from ..contracts.report import (
    EventEvidence,
    IncidentReport,
    LlmReport,
    LogEvidence,
    Recommendation,
    TimelineEntry,
)
from .extract import extract_json
from .timestamps import normalize_timestamp

LOGGER = logging.getLogger(__name__)


class ParseError(ValueError):
    """Raised when an LLM response cannot be parsed."""


def parse_result(text: str) -> LlmReport:
    """Parse the JSON object embedded in ``text`` into an ``LlmReport``."""

    span = extract_json(text)
    if span is None:
        raise ParseError("no JSON object found in LLM response")
    try:
        data = json.loads(span)
    except (ValueError, RecursionError) as exc:
        raise ParseError("LLM response is not valid JSON") from exc
    try:
        return LlmReport.model_validate(data)
    except ValidationError as exc:
        raise ParseError("LLM response does not match schema") from exc


def _to_report(wire: LlmReport) -> IncidentReport:
    return IncidentReport(
        root_cause=wire.root_cause,
        confidence=wire.confidence,
        reasoning=wire.reasoning,
        timeline=[
            TimelineEntry(
                timestamp=normalize_timestamp(t.timestamp),
                event=t.event,
                details=t.details,
            )
            for t in wire.timeline
        ],
        evidence_logs=[
            LogEvidence(
                timestamp=normalize_timestamp(log.timestamp),
                line=log.line,
                container=log.container or None,
            )
            for log in wire.evidence.logs
        ],
        evidence_events=[
            EventEvidence(
                type=e.type,
                reason=e.reason,
                message=e.message,
                timestamp=normalize_timestamp(e.timestamp),
            )
            for e in wire.evidence.events
        ],
        recommendations=[
            Recommendation(
                priority=r.priority,
                action=r.action,
                details=r.details or None,
                command=r.command or None,
            )
            for r in wire.recommendations
        ],
    )


def normalize_reply(text: str) -> IncidentReport:
    """Return an ``IncidentReport`` for ``text``; never raises.

    A reply without a usable JSON object yields the unparsed report, which
    carries the whole reply as its reasoning.
    """

    try:
        wire = parse_result(text)
    except ParseError as exc:
        LOGGER.warning("%s, using raw text", exc)
        LOGGER.debug("unparsed LLM response: %s", text[:200])
        return IncidentReport.unparsed(text)

    report = _to_report(wire)
    if not report.root_cause and not report.reasoning:
        LOGGER.warning("LLM response has neither root cause nor reasoning")
        return report.model_copy(
            update=IncidentReport.unparsed(text).model_dump(
                include={"root_cause", "confidence", "reasoning"}
            )
        )
    return report


__all__ = ["ParseError", "normalize_reply", "parse_result"]
