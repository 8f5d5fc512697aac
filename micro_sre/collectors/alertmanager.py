"""AlertManager API client."""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import TypeAdapter, ValidationError

from ..contracts.alert import AlertRecord
from ..errors import CollectorUnavailable

LOGGER = logging.getLogger(__name__)

_ALERTS = TypeAdapter(list[AlertRecord])


class AlertManagerClient:
    """Read alerts from the AlertManager v2 API."""

    def __init__(self, base_url: str, *, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def get_alerts(self) -> list[AlertRecord]:
        url = f"{self.base_url}/api/v2/alerts"
        try:
            resp = requests.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CollectorUnavailable(f"failed to fetch alerts: {exc}") from exc
        if resp.status_code != 200:
            raise CollectorUnavailable(
                f"alertmanager returned status {resp.status_code}"
            )
        try:
            data: Any = resp.json()
            return _ALERTS.validate_python(data)
        except (ValueError, ValidationError) as exc:
            raise CollectorUnavailable(f"failed to decode alerts: {exc}") from exc

    def get_active_alerts(self) -> list[AlertRecord]:
        alerts = [a for a in self.get_alerts() if a.is_firing]
        LOGGER.debug("%d active alert(s) at %s", len(alerts), self.base_url)
        return alerts

    def get_alerts_by_namespace(self, namespace: str) -> list[AlertRecord]:
        return [a for a in self.get_active_alerts() if a.namespace == namespace]


__all__ = ["AlertManagerClient"]
