"""Warm loop -- keeps one cluster's connection path hot until shutdown."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog
from kubernetes import client as k8s_client

from kube_warmer.clients import build_core_api
from kube_warmer.clients.k8s_probe import NodeProbe
from kube_warmer.models import LoopResult

log = structlog.get_logger()

HandleBuilder = Callable[[k8s_client.Configuration], k8s_client.CoreV1Api]


async def _wait_for_tick(cancel: asyncio.Event, interval: float) -> bool:
    """Block until the next tick or cancellation. Returns True when cancelled."""
    try:
        await asyncio.wait_for(cancel.wait(), timeout=interval)
    except TimeoutError:
        return False
    return True


async def warm_cluster_connection(
    context: str,
    configuration: k8s_client.Configuration,
    cancel: asyncio.Event,
    *,
    interval: float,
    probe_timeout: float,
    build_handle: HandleBuilder = build_core_api,
) -> LoopResult:
    """Probe one cluster every ``interval`` seconds until ``cancel`` is set.

    A failure to build the API handle ends this loop only. Probe failures are
    logged and the loop carries on with the next tick; there is no retry or
    backoff. An in-flight probe is never interrupted, cancellation is checked
    again at the next cycle boundary.
    """
    log.info("warming", context=context, interval=interval)

    try:
        api = build_handle(configuration)
    except Exception as e:
        log.error("client_construction_failed", context=context, error=str(e))
        return LoopResult(context=context, outcome="construction_failed", error=str(e))

    probe = NodeProbe(context, api, timeout=probe_timeout)
    probes_sent = 0
    probe_failures = 0
    try:
        while not await _wait_for_tick(cancel, interval):
            probes_sent += 1
            try:
                await probe.probe()
            except Exception as e:
                probe_failures += 1
                log.warning("probe_failed", context=context, error=str(e))
    finally:
        probe.close()

    log.info("warm_loop_stopped", context=context, probes_sent=probes_sent, probe_failures=probe_failures)
    return LoopResult(
        context=context,
        outcome="cancelled",
        probes_sent=probes_sent,
        probe_failures=probe_failures,
    )
