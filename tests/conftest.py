"""Shared test fixtures for all test modules."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog
import yaml

from kube_warmer.config import ContextSet, WarmerSettings


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any structlog.configure() a test triggered through the CLI."""
    yield
    structlog.reset_defaults()


def _kubeconfig_dict(contexts: list[str], missing_cluster: tuple[str, ...] = ()) -> dict[str, Any]:
    # Token auth only, so resolving a context never shells out to an exec plugin.
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": contexts[0] if contexts else "",
        "clusters": [
            {"name": f"{name}-cluster", "cluster": {"server": f"https://{name}.example.com"}}
            for name in contexts
            if name not in missing_cluster
        ],
        "users": [{"name": f"{name}-user", "user": {"token": f"token-{name}"}} for name in contexts],
        "contexts": [
            {"name": name, "context": {"cluster": f"{name}-cluster", "user": f"{name}-user"}} for name in contexts
        ],
    }


@pytest.fixture
def write_kubeconfig(tmp_path: Path) -> Callable[..., Path]:
    """Write a kubeconfig with one cluster and user per context; return its path.

    Contexts named in ``missing_cluster`` point at a cluster that is not defined.
    """

    def _write(contexts: list[str], missing_cluster: tuple[str, ...] = ()) -> Path:
        path = tmp_path / "config"
        path.write_text(yaml.safe_dump(_kubeconfig_dict(contexts, missing_cluster)))
        return path

    return _write


@pytest.fixture
def context_set() -> Callable[[list[str]], ContextSet]:
    """Build an in-memory ContextSet for the given context names."""

    def _make(names: list[str]) -> ContextSet:
        return ContextSet(path=Path("/tmp/kubeconfig"), raw=_kubeconfig_dict(names), names=tuple(names))

    return _make


@pytest.fixture
def mock_core_api() -> Callable[..., MagicMock]:
    """Factory for a mock CoreV1Api; ``side_effect`` is applied to list_node."""

    def _make(side_effect: Any = None) -> MagicMock:
        api = MagicMock()
        api.list_node.side_effect = side_effect
        return api

    return _make


@pytest.fixture
def fast_settings() -> WarmerSettings:
    return WarmerSettings(probe_interval=0.01, grace_period=5.0, probe_timeout=1.0)
