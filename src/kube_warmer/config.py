"""Kubeconfig discovery, context loading, and warmer settings with environment overrides."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from kubernetes import client as k8s_client
from kubernetes.config.kube_config import KubeConfigLoader

DEFAULT_KUBECONFIG = "~/.kube/config"


class WarmerError(Exception):
    """Base class for startup-fatal warmer errors."""


class KubeconfigError(WarmerError):
    """The kubeconfig file could not be located, read, or parsed."""


class SettingsError(WarmerError):
    """A timing setting is not a positive number."""


class ContextResolutionError(WarmerError):
    """A single context could not be turned into client connection parameters."""

    def __init__(self, context: str, reason: str) -> None:
        super().__init__(f"Failed to resolve kubeconfig context '{context}': {reason}")
        self.context = context


def _env_seconds(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        msg = f"{name} must be a number of seconds, got '{raw}'."
        raise SettingsError(msg) from None


@dataclass(frozen=True)
class WarmerSettings:
    """Timing knobs with environment variable overrides (seconds)."""

    probe_interval: float = field(default_factory=lambda: _env_seconds("KUBE_WARMER_PROBE_INTERVAL", "5"))
    grace_period: float = field(default_factory=lambda: _env_seconds("KUBE_WARMER_GRACE_PERIOD", "5"))
    probe_timeout: float = field(default_factory=lambda: _env_seconds("KUBE_WARMER_PROBE_TIMEOUT", "10"))

    def __post_init__(self) -> None:
        for name in ("probe_interval", "grace_period", "probe_timeout"):
            value = getattr(self, name)
            if not value > 0:
                msg = f"{name} must be a positive number of seconds, got {value}."
                raise SettingsError(msg)


def get_settings() -> WarmerSettings:
    """Return warmer settings with environment variable overrides applied."""
    return WarmerSettings()


@dataclass(frozen=True)
class ContextSet:
    """All contexts found in one kubeconfig file, in file order. Read-only after load."""

    path: Path
    raw: dict[str, Any]
    names: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names


def find_kubeconfig() -> Path:
    """Locate the kubeconfig file.

    ``KUBECONFIG`` wins when set. It may hold several paths joined by
    ``os.pathsep``; only the first non-empty entry is used. Otherwise falls
    back to ``~/.kube/config``.
    """
    env = os.environ.get("KUBECONFIG", "")
    for entry in env.split(os.pathsep):
        if entry.strip():
            return Path(entry.strip()).expanduser()
    return Path(DEFAULT_KUBECONFIG).expanduser()


def load_contexts(path: Path | None = None) -> ContextSet:
    """Parse a kubeconfig file and return its contexts.

    Args:
        path: Explicit kubeconfig path. Defaults to :func:`find_kubeconfig`.

    Raises:
        KubeconfigError: If the file is missing, unreadable, or malformed.
    """
    path = path if path is not None else find_kubeconfig()
    if not path.is_file():
        msg = f"Kubeconfig file not found: {path}. Set KUBECONFIG or pass --kubeconfig."
        raise KubeconfigError(msg)

    try:
        raw = yaml.safe_load(path.read_text())
    except OSError as e:
        msg = f"Kubeconfig file {path} could not be read: {e}"
        raise KubeconfigError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Kubeconfig file {path} is not valid YAML: {e}"
        raise KubeconfigError(msg) from e

    if not isinstance(raw, dict):
        msg = f"Kubeconfig file {path} must be a mapping, got {type(raw).__name__}."
        raise KubeconfigError(msg)

    contexts_raw = raw.get("contexts")
    if contexts_raw is None:
        contexts_raw = []
    if not isinstance(contexts_raw, list):
        msg = f"Kubeconfig file {path} has an invalid 'contexts' section."
        raise KubeconfigError(msg)

    names: list[str] = []
    for entry in contexts_raw:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str) or not entry["name"]:
            msg = f"Kubeconfig file {path} contains a context entry without a name."
            raise KubeconfigError(msg)
        if entry["name"] in names:
            msg = f"Kubeconfig file {path} defines context '{entry['name']}' more than once."
            raise KubeconfigError(msg)
        names.append(entry["name"])

    return ContextSet(path=path, raw=raw, names=tuple(names))


def select_contexts(context_set: ContextSet, include: Iterable[str] | None = None) -> ContextSet:
    """Narrow a context set to the requested names, keeping file order.

    Raises:
        KubeconfigError: If any requested name is not in the kubeconfig.
    """
    wanted = list(include or [])
    if not wanted:
        return context_set

    unknown = [name for name in wanted if name not in context_set]
    if unknown:
        valid = ", ".join(context_set.names) or "<none>"
        msg = f"Unknown context(s): {', '.join(unknown)}. Valid contexts: {valid}"
        raise KubeconfigError(msg)

    names = tuple(name for name in context_set.names if name in wanted)
    return ContextSet(path=context_set.path, raw=context_set.raw, names=names)


def resolve_client_configuration(context_set: ContextSet, context: str) -> k8s_client.Configuration:
    """Derive the client configuration for one context without touching global SDK state.

    Relative certificate and key paths resolve against the kubeconfig's directory.

    Raises:
        ContextResolutionError: If the context's cluster or user cannot be resolved.
    """
    configuration = k8s_client.Configuration()
    try:
        loader = KubeConfigLoader(
            config_dict=context_set.raw,
            active_context=context,
            config_base_path=str(context_set.path.parent),
        )
        loader.load_and_set(configuration)
    except Exception as e:
        raise ContextResolutionError(context, str(e)) from e
    return configuration
