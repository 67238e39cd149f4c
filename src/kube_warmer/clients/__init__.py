"""Client wrappers for the Kubernetes API."""

from __future__ import annotations

from kubernetes import client as k8s_client


# Each call returns its own ApiClient so no two warm loops share a connection pool,
# auth headers, or TLS settings.
def build_core_api(configuration: k8s_client.Configuration) -> k8s_client.CoreV1Api:
    """Create an isolated Core V1 API handle bound to one context's configuration."""
    api_client = k8s_client.ApiClient(configuration=configuration)
    return k8s_client.CoreV1Api(api_client)
