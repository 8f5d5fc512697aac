"""LLM-assisted root cause analysis for Kubernetes alerts."""

__version__ = "0.1.0"
