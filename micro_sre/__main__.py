"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path

from pydantic import ValidationError

from .analysis.analyzer import Analyzer
from .analysis.coordinator import BatchCoordinator
from .analysis.types import AnalysisTarget
from .collectors import AlertManagerClient, KubernetesCollector
from .config import Config, load_config, parse_duration
from .contracts.alert import AlertManagerWebhook, AlertRecord
from .errors import CollectionError, ConfigError, ModelError
from .llm import create_llm
from .storage import JsonlReportStore

LOGGER = logging.getLogger(__name__)


def _duration_arg(value: str) -> timedelta:
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="micro-sre", description="Root cause analysis for Kubernetes pods"
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", parents=[common], help="Analyze a single pod")
    analyze.add_argument("--namespace", required=True)
    analyze.add_argument("--pod", required=True)
    analyze.add_argument("--lookback", type=_duration_arg)

    batch = sub.add_parser("batch", parents=[common], help="Analyze a batch of alerts")
    source = batch.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="AlertManager webhook payload")
    source.add_argument(
        "--alertmanager", action="store_true", help="Poll active alerts"
    )
    batch.add_argument("--lookback", type=_duration_arg)
    batch.add_argument("--timeout", type=_duration_arg)
    return parser


def _build_analyzer(config: Config) -> Analyzer:
    return Analyzer(
        KubernetesCollector.from_config(config),
        create_llm(config.llm),
        max_log_chars=config.agent.max_log_chars,
    )


def _read_alerts(args: argparse.Namespace, config: Config) -> list[AlertRecord]:
    if args.file is not None:
        try:
            payload = AlertManagerWebhook.model_validate_json(
                args.file.read_text(encoding="utf-8")
            )
        except (OSError, ValidationError) as exc:
            raise ConfigError(f"failed to read alerts from {args.file}: {exc}") from exc
        return payload.alerts
    return AlertManagerClient(config.alertmanager.url).get_active_alerts()


def _analyze(args: argparse.Namespace, config: Config) -> int:
    lookback = args.lookback or config.log_collection.default_lookback
    target = AnalysisTarget(args.namespace, args.pod, lookback)
    try:
        result = _build_analyzer(config).run(target)
    except (CollectionError, ModelError) as exc:
        LOGGER.error("analysis failed: %s", exc)
        return 1
    print(result.model_dump_json(indent=2))
    return 0


def _batch(args: argparse.Namespace, config: Config) -> int:
    try:
        alerts = _read_alerts(args, config)
    except CollectionError as exc:
        LOGGER.error("failed to fetch alerts: %s", exc)
        return 1
    lookback = args.lookback or config.log_collection.default_lookback
    timeout = args.timeout or config.agent.analysis_timeout
    store = JsonlReportStore(config.storage.directory, config.storage.max_bytes)
    coordinator = BatchCoordinator(
        _build_analyzer(config),
        store=store,
        max_parallel=config.agent.max_parallel_fetches,
    )
    try:
        result = coordinator.process_batch_sync(alerts, lookback, timeout)
    finally:
        store.close()
    print(result.model_dump_json(indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO), stream=sys.stderr
    )
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
        if args.command == "analyze":
            return _analyze(args, config)
        return _batch(args, config)
    except ConfigError as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - manual entry
    sys.exit(main())
