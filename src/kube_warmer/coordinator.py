"""Warming coordinator -- one warm loop per kubeconfig context, joined as a fleet."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog
from kubernetes import client as k8s_client

from kube_warmer.clients import build_core_api
from kube_warmer.config import ContextSet, WarmerSettings, resolve_client_configuration
from kube_warmer.models import LoopResult, WarmingSummary
from kube_warmer.warm import HandleBuilder, warm_cluster_connection

log = structlog.get_logger()

ConfigurationResolver = Callable[[ContextSet, str], k8s_client.Configuration]


async def run_warming(
    context_set: ContextSet,
    cancel: asyncio.Event,
    settings: WarmerSettings,
    *,
    build_handle: HandleBuilder = build_core_api,
    resolve: ConfigurationResolver = resolve_client_configuration,
) -> WarmingSummary:
    """Warm every context in ``context_set`` and block until all loops have exited.

    Every context is resolved before the first loop is created, so a
    ContextResolutionError aborts startup with nothing running. Each task is
    appended to ``tasks`` in the same synchronous step that creates it; none
    of them can start before the gather below yields, so the join always sees
    the full fleet.

    Raises:
        ContextResolutionError: If any context cannot be resolved.
    """
    configurations = {name: resolve(context_set, name) for name in context_set}

    tasks: list[asyncio.Task[LoopResult]] = []
    for name, configuration in configurations.items():
        task = asyncio.create_task(
            warm_cluster_connection(
                name,
                configuration,
                cancel,
                interval=settings.probe_interval,
                probe_timeout=settings.probe_timeout,
                build_handle=build_handle,
            ),
            name=f"warm:{name}",
        )
        tasks.append(task)

    log.info("warming_started", contexts=len(tasks))
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: list[LoopResult] = []
    crashed = 0
    for name, outcome in zip(configurations, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            crashed += 1
            log.error("warm_loop_crashed", context=name, error=repr(outcome))
        else:
            results.append(outcome)

    summary = WarmingSummary.from_results(len(tasks), results, crashed=crashed)
    log.info(
        "warming_finished",
        contexts=summary.contexts,
        cancelled=summary.cancelled,
        construction_failed=summary.construction_failed,
        crashed=summary.crashed,
    )
    return summary
