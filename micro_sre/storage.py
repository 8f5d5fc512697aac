"""Persistence of analysis results as rotating JSONL files."""

from __future__ import annotations

import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, TextIO

from pydantic import ValidationError

from .contracts.report import AnalysisResult

LOGGER = logging.getLogger(__name__)

StoreKey = tuple[str, str, str]


class ReportStore(Protocol):
    """Destination for finished analyses."""

    def save(self, result: AnalysisResult) -> None:
        """Persist ``result``, replacing any record with the same key."""


def _file_order(path: Path) -> tuple[str, int]:
    stem = path.stem  # analyses_<date>_<time>_<n>
    prefix, _, counter = stem.rpartition("_")
    try:
        return prefix, int(counter)
    except ValueError:
        return stem, 0


class JsonlReportStore:
    """Append analysis results to rotating JSONL files.

    Records are keyed by namespace, pod and alert start time. Saving the same
    key twice keeps both lines on disk; :meth:`load` returns the newest one.
    """

    def __init__(self, directory: Path | str, max_bytes: int = 1_000_000) -> None:
        self.directory = Path(directory)
        self.max_bytes = max_bytes
        self.directory.mkdir(parents=True, exist_ok=True)
        self._counter = 0
        self._lock = threading.Lock()
        self._file: TextIO | None = None

    def _open_file(self) -> TextIO:
        timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
        path = self.directory / f"analyses_{timestamp}_{self._counter}.jsonl"
        self._counter += 1
        return path.open("a", encoding="utf-8")

    def save(self, result: AnalysisResult) -> None:
        record = {
            "key": list(result.store_key),
            "result": result.model_dump(mode="json"),
        }
        line = json.dumps(record, sort_keys=True)
        with self._lock:
            if self._file is None:
                self._file = self._open_file()
            elif self._file.tell() + len(line) + 1 > self.max_bytes:
                self._file.close()
                self._file = self._open_file()
            self._file.write(line + "\n")
            self._file.flush()
        LOGGER.debug("saved analysis %s", "/".join(result.store_key))

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def load(self) -> dict[StoreKey, AnalysisResult]:
        """Return the newest stored result for every key.

        Malformed lines are skipped.
        """

        results: dict[StoreKey, AnalysisResult] = {}
        for path in sorted(self.directory.glob("analyses_*.jsonl"), key=_file_order):
            for line in path.read_text(encoding="utf-8").splitlines():
                try:
                    data = json.loads(line)
                    result = AnalysisResult.model_validate(data["result"])
                except (json.JSONDecodeError, KeyError, TypeError, ValidationError):
                    LOGGER.debug("skipping malformed record in %s", path)
                    continue
                results[result.store_key] = result
        LOGGER.debug("loaded %d analysis record(s) from %s", len(results), self.directory)
        return results


__all__ = ["JsonlReportStore", "ReportStore", "StoreKey"]
