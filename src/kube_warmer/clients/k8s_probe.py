"""Kubernetes health probe -- a cheap, read-only node listing."""

from __future__ import annotations

import asyncio

from kubernetes import client as k8s_client

# One node is enough to exercise DNS, TLS, auth and the API server round trip.
PROBE_PAGE_SIZE = 1


class NodeProbe:
    """Issues bounded ``list_node`` calls against one cluster."""

    def __init__(self, context: str, api: k8s_client.CoreV1Api, timeout: float) -> None:
        self._context = context
        self._api = api
        self._timeout = timeout

    @property
    def context(self) -> str:
        return self._context

    async def probe(self) -> None:
        """Run one probe in a worker thread. Raises whatever the client raises."""
        await asyncio.to_thread(
            self._api.list_node,
            limit=PROBE_PAGE_SIZE,
            _request_timeout=self._timeout,
        )

    def close(self) -> None:
        """Release the underlying connection pool."""
        api_client = getattr(self._api, "api_client", None)
        if api_client is not None:
            api_client.close()
            api_client.rest_client.pool_manager.clear()
