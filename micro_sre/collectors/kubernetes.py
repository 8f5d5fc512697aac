"""Kubernetes evidence collector.

Never logs kubeconfig contents, only the path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError as TransportError
from urllib3.exceptions import MaxRetryError
from urllib3.exceptions import TimeoutError as TransportTimeout

from ..analysis.types import CollectedEvidence, EventRecord
from ..config import Config
from ..errors import (
    CollectionError,
    CollectorTimeout,
    CollectorUnavailable,
    ConfigError,
    PodNotFoundError,
)

LOGGER = logging.getLogger(__name__)


def load_core_api(kubeconfig: str = "", context: str = "") -> client.CoreV1Api:
    """Return a ``CoreV1Api`` from ``kubeconfig``, in-cluster config or defaults."""

    try:
        if kubeconfig:
            LOGGER.debug("loading kubeconfig from %s", kubeconfig)
            kube_config.load_kube_config(config_file=kubeconfig, context=context or None)
        else:
            try:
                kube_config.load_incluster_config()
            except ConfigException:
                kube_config.load_kube_config(context=context or None)
    except (ConfigException, OSError) as exc:
        raise ConfigError(f"failed to create kubernetes config: {exc}") from exc
    return client.CoreV1Api()


def _classify(exc: Exception, what: str) -> CollectionError:
    if isinstance(exc, ApiException):
        if exc.status == 404:
            return PodNotFoundError(f"failed to get {what}: not found")
        return CollectorUnavailable(f"failed to get {what}: {exc.status} {exc.reason}")
    if isinstance(exc, TransportTimeout) or (
        isinstance(exc, MaxRetryError) and isinstance(exc.reason, TransportTimeout)
    ):
        return CollectorTimeout(f"failed to get {what}: timed out")
    return CollectorUnavailable(f"failed to get {what}: {exc}")


def _event_time(event: Any) -> datetime | None:
    ts = getattr(event, "last_timestamp", None) or getattr(event, "event_time", None)
    if ts is not None and ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts


class KubernetesCollector:
    """Collect pod state, logs and events through the core v1 API."""

    def __init__(
        self,
        api: client.CoreV1Api,
        *,
        tail_lines: int = 1000,
        include_previous: bool = False,
        event_types: Iterable[str] = (),
        max_log_lookback: timedelta | None = None,
        max_event_lookback: timedelta | None = None,
        now_fn: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.api = api
        self.tail_lines = tail_lines
        self.include_previous = include_previous
        self.event_types = frozenset(event_types)
        self.max_log_lookback = max_log_lookback
        self.max_event_lookback = max_event_lookback
        self._now = now_fn

    @classmethod
    def from_config(cls, settings: Config) -> KubernetesCollector:
        api = load_core_api(settings.kubernetes.kubeconfig, settings.kubernetes.context)
        return cls(
            api,
            tail_lines=settings.log_collection.tail_lines,
            include_previous=settings.log_collection.include_previous,
            event_types=settings.event_collection.event_types,
            max_log_lookback=settings.log_collection.max_lookback,
            max_event_lookback=settings.event_collection.max_lookback,
        )

    def get_pod(self, namespace: str, pod_name: str, *, timeout: float) -> Any:
        try:
            return self.api.read_namespaced_pod(
                pod_name, namespace, _request_timeout=timeout
            )
        except (ApiException, TransportError) as exc:
            raise _classify(exc, f"pod {namespace}/{pod_name}") from exc

    def get_pod_logs(
        self,
        namespace: str,
        pod_name: str,
        lookback: timedelta,
        *,
        timeout: float,
        previous: bool = False,
    ) -> str:
        if self.max_log_lookback is not None:
            lookback = min(lookback, self.max_log_lookback)
        return self.api.read_namespaced_pod_log(
            pod_name,
            namespace,
            since_seconds=max(int(lookback.total_seconds()), 1),
            tail_lines=self.tail_lines,
            timestamps=True,
            previous=previous,
            _request_timeout=timeout,
        )

    def get_pod_events(
        self,
        namespace: str,
        pod_name: str,
        lookback: timedelta,
        *,
        timeout: float,
    ) -> list[EventRecord]:
        if self.max_event_lookback is not None:
            lookback = min(lookback, self.max_event_lookback)
        selector = f"involvedObject.name={pod_name},involvedObject.kind=Pod"
        listing = self.api.list_namespaced_event(
            namespace, field_selector=selector, _request_timeout=timeout
        )
        cutoff = self._now() - lookback
        events: list[EventRecord] = []
        for item in listing.items or []:
            ts = _event_time(item)
            if ts is None or ts <= cutoff:
                continue
            if self.event_types and item.type not in self.event_types:
                continue
            events.append(
                EventRecord(
                    type=item.type or "",
                    reason=item.reason or "",
                    message=item.message or "",
                    timestamp=ts,
                )
            )
        return events

    def _collect_logs(
        self, namespace: str, pod_name: str, lookback: timedelta, timeout: float
    ) -> str:
        try:
            logs = self.get_pod_logs(namespace, pod_name, lookback, timeout=timeout)
        except (ApiException, TransportError) as exc:
            LOGGER.warning("failed to fetch logs for %s/%s: %s", namespace, pod_name, exc)
            return f"Error fetching logs: {exc}"
        if not self.include_previous:
            return logs
        try:
            previous = self.get_pod_logs(
                namespace, pod_name, lookback, timeout=timeout, previous=True
            )
        except (ApiException, TransportError):
            LOGGER.debug("no previous container logs for %s/%s", namespace, pod_name)
            return logs
        return f"--- previous container ---\n{previous}\n--- current container ---\n{logs}"

    def fetch_evidence(
        self,
        namespace: str,
        pod_name: str,
        lookback: timedelta,
        *,
        timeout: float,
    ) -> CollectedEvidence:
        pod = self.get_pod(namespace, pod_name, timeout=timeout)
        logs = self._collect_logs(namespace, pod_name, lookback, timeout)
        try:
            events = self.get_pod_events(namespace, pod_name, lookback, timeout=timeout)
        except (ApiException, TransportError) as exc:
            LOGGER.warning(
                "failed to fetch events for %s/%s: %s", namespace, pod_name, exc
            )
            events = []
        snapshot = self.api.api_client.sanitize_for_serialization(pod)
        LOGGER.debug(
            "collected %d log chars and %d event(s) for %s/%s",
            len(logs),
            len(events),
            namespace,
            pod_name,
        )
        return CollectedEvidence(
            pod_snapshot=snapshot, log_text=logs, events=tuple(events)
        )


__all__ = ["KubernetesCollector", "load_core_api"]
