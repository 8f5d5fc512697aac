"""Analysis pipeline: reply parsing, prompts and the analyzers.

:class:`~micro_sre.analysis.analyzer.Analyzer` and
:class:`~micro_sre.analysis.coordinator.BatchCoordinator` depend on the
collectors, so they are imported from their modules rather than re-exported
here.
"""

from .extract import extract_json
from .parse import ParseError, normalize_reply, parse_result
from .timestamps import normalize_timestamp
from .types import AnalysisTarget, CollectedEvidence, Deadline, EventRecord, Prompt

__all__ = [
    "AnalysisTarget",
    "CollectedEvidence",
    "Deadline",
    "EventRecord",
    "ParseError",
    "Prompt",
    "extract_json",
    "normalize_reply",
    "normalize_timestamp",
    "parse_result",
]
