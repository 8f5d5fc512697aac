"""Evidence collectors and alert sources."""

from .alertmanager import AlertManagerClient
from .base import Collector
from .kubernetes import KubernetesCollector, load_core_api

__all__ = ["AlertManagerClient", "Collector", "KubernetesCollector", "load_core_api"]
