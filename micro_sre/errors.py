"""Exception hierarchy shared by collectors, LLM adapters and the pipeline."""

from __future__ import annotations


class SreError(RuntimeError):
    """Base class for all micro-sre failures."""


class ConfigError(SreError):
    """Raised when configuration cannot be loaded."""


class CollectionError(SreError):
    """Raised when evidence for a pod cannot be collected."""


class PodNotFoundError(CollectionError):
    """Raised when the target pod does not exist."""


class CollectorUnavailable(CollectionError):
    """Raised when the Kubernetes API cannot be reached."""


class CollectorTimeout(CollectionError):
    """Raised when collection does not finish before the deadline."""


class ModelError(SreError):
    """Raised when the language model call fails."""


class ModelTimeout(ModelError):
    """Raised when the model does not answer in time."""


class ProviderError(ModelError):
    """Raised when the model provider rejects or fails the request."""


class EmptyResponse(ModelError):
    """Raised when the model returns no usable text."""


class AlertValidationError(SreError):
    """Raised when an alert lacks the labels needed to locate a pod."""


__all__ = [
    "AlertValidationError",
    "CollectionError",
    "CollectorTimeout",
    "CollectorUnavailable",
    "ConfigError",
    "EmptyResponse",
    "ModelError",
    "ModelTimeout",
    "PodNotFoundError",
    "ProviderError",
    "SreError",
]
