"""Base protocol for evidence collectors."""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol

from ..analysis.types import CollectedEvidence


class Collector(Protocol):
    """Source of pod state, logs and events."""

    def fetch_evidence(
        self,
        namespace: str,
        pod_name: str,
        lookback: timedelta,
        *,
        timeout: float,
    ) -> CollectedEvidence:
        """Return evidence for ``pod_name`` covering the last ``lookback``.

        Raises :class:`~micro_sre.errors.CollectionError` when the pod itself
        cannot be read. Failures to read logs or events are not fatal.
        """


__all__ = ["Collector"]
