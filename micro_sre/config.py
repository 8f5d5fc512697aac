"""Configuration loaded from YAML with environment overrides."""

from __future__ import annotations

import logging
import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, BeforeValidator, Field, ValidationError

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}

DEFAULT_PATHS = (Path("config/config.yaml"), Path("config.yaml"))


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as ``1h30m``, ``45s`` or ``500ms``.

    >>> parse_duration("1h30m")
    datetime.timedelta(seconds=5400)
    """

    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    seconds = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=seconds)


def _duration(value: Any) -> Any:
    if isinstance(value, str):
        return parse_duration(value)
    if isinstance(value, int | float):
        return timedelta(seconds=value)
    return value


Duration = Annotated[timedelta, BeforeValidator(_duration)]


class AlertManagerConfig(BaseModel):
    url: str = "http://localhost:9093"


class KubernetesConfig(BaseModel):
    kubeconfig: str = ""
    context: str = ""


class LogCollectionConfig(BaseModel):
    default_lookback: Duration = timedelta(hours=1)
    max_lookback: Duration = timedelta(hours=24)
    tail_lines: int = 1000
    include_previous: bool = False


class EventCollectionConfig(BaseModel):
    max_lookback: Duration = timedelta(hours=24)
    event_types: list[str] = Field(default_factory=list)


class LLMConfig(BaseModel):
    provider: str = "anthropic"
    api_key: str = Field("", repr=False)
    model: str = "claude-sonnet-4-5"
    max_tokens: int = 4096
    temperature: float = 0.2


class AgentConfig(BaseModel):
    max_parallel_fetches: int = 0
    analysis_timeout: Duration = timedelta(minutes=5)
    max_log_chars: int = 5000


class StorageConfig(BaseModel):
    directory: Path = Path("analyses")
    max_bytes: int = 1_000_000


class Config(BaseModel):
    """Complete micro-sre configuration."""

    alertmanager: AlertManagerConfig = Field(default_factory=AlertManagerConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    log_collection: LogCollectionConfig = Field(default_factory=LogCollectionConfig)
    event_collection: EventCollectionConfig = Field(
        default_factory=EventCollectionConfig
    )
    llm: LLMConfig = Field(default_factory=LLMConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def _read_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    return data


def _apply_env(config: Config) -> Config:
    llm = config.llm
    if provider := os.getenv("MICRO_SRE_LLM_PROVIDER"):
        llm.provider = provider
    if model := os.getenv("MICRO_SRE_LLM_MODEL"):
        llm.model = model
    if key := os.getenv("ANTHROPIC_API_KEY"):
        llm.api_key = key
    key = os.getenv("OPENAI_API_KEY")
    if key and llm.provider == "openai":
        llm.api_key = key
    return config


def load_config(path: Path | str | None = None) -> Config:
    """Return the configuration from ``path`` or the default locations.

    A missing default file is not an error; a missing explicit ``path`` is.
    Environment variables override API credentials and the LLM backend.
    """

    data: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        data = _read_yaml(path)
    else:
        for candidate in DEFAULT_PATHS:
            if candidate.exists():
                LOGGER.debug("loading config from %s", candidate)
                data = _read_yaml(candidate)
                break
    try:
        config = Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
    return _apply_env(config)


__all__ = [
    "AgentConfig",
    "AlertManagerConfig",
    "Config",
    "EventCollectionConfig",
    "KubernetesConfig",
    "LLMConfig",
    "LogCollectionConfig",
    "StorageConfig",
    "load_config",
    "parse_duration",
]
