"""Process entry point: load contexts, warm them, shut down on SIGINT/SIGTERM."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
from collections.abc import Sequence
from pathlib import Path

import structlog

from kube_warmer.config import WarmerError, WarmerSettings, get_settings, load_contexts, select_contexts
from kube_warmer.coordinator import run_warming
from kube_warmer.log_config import configure_logging
from kube_warmer.shutdown import ShutdownController

log = structlog.get_logger()

EXIT_OK = 0
EXIT_STARTUP_FAILED = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kube-warmer",
        description="Keep connections to every kubeconfig context warm with periodic health probes.",
    )
    parser.add_argument(
        "--kubeconfig",
        type=Path,
        default=None,
        help="Kubeconfig path (default: $KUBECONFIG or ~/.kube/config).",
    )
    parser.add_argument(
        "--context",
        action="append",
        default=[],
        dest="contexts",
        metavar="NAME",
        help="Only warm this context. Repeatable. Default: every context in the kubeconfig.",
    )
    parser.add_argument("--interval", type=float, default=None, help="Seconds between probes per cluster.")
    parser.add_argument("--grace-period", type=float, default=None, help="Seconds to wait for loops after a signal.")
    parser.add_argument("--log-format", choices=("auto", "console", "json"), default="auto")
    return parser


def _apply_overrides(settings: WarmerSettings, args: argparse.Namespace) -> WarmerSettings:
    overrides: dict[str, float] = {}
    if args.interval is not None:
        overrides["probe_interval"] = args.interval
    if args.grace_period is not None:
        overrides["grace_period"] = args.grace_period
    return dataclasses.replace(settings, **overrides) if overrides else settings


async def _run(args: argparse.Namespace, settings: WarmerSettings) -> int:
    controller = ShutdownController(settings.grace_period)
    loop = asyncio.get_running_loop()
    controller.install(loop)
    try:
        context_set = select_contexts(load_contexts(args.kubeconfig), args.contexts)
        log.info("contexts_loaded", path=str(context_set.path), contexts=list(context_set.names))
        await run_warming(context_set, controller.cancel_event, settings)
    finally:
        controller.disarm()
        controller.uninstall(loop)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Run the warmer. Returns the process exit code."""
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_format)
    log.info("starting")
    try:
        settings = _apply_overrides(get_settings(), args)
        log.info("settings_loaded", probe_interval=settings.probe_interval, grace_period=settings.grace_period)
        code = asyncio.run(_run(args, settings))
    except WarmerError as e:
        log.error("startup_failed", error=str(e))
        return EXIT_STARTUP_FAILED

    log.info("shutting_down", exit_code=code)
    return code
