"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from enum import StrEnum

from podwatch.models.config import (
    APIConfig,
    ClusterConfig,
    LogConfig,
    MonitorConfig,
    PodwatchConfig,
)
from podwatch.models.pods import DEFAULT_REFRESH_INTERVAL_MS, NamespaceConfig

_DEFAULT_NAMESPACES = "default,kube-system"


class ConnectionSource(StrEnum):
    """Where cluster credentials are loaded from."""

    KUBECONFIG_FILE = "kubeconfig_file"
    IN_CLUSTER = "in_cluster"
    DEFAULT = "default"


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"PODWATCH_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None, max_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def parse_namespaces(value: str, refresh_interval: int = DEFAULT_REFRESH_INTERVAL_MS) -> list[NamespaceConfig]:
    """Turn ``"a, b,c"`` into enabled NamespaceConfig entries, dropping blanks."""
    return [
        NamespaceConfig(name=name.strip(), enabled=True, refresh_interval=refresh_interval)
        for name in value.split(",")
        if name.strip()
    ]


def select_connection_source(kubeconfig: str, environ: dict[str, str] | None = None) -> ConnectionSource:
    """Pick the credential source: explicit file, then in-cluster, then default discovery."""
    env = os.environ if environ is None else environ
    if kubeconfig:
        return ConnectionSource.KUBECONFIG_FILE
    if env.get("KUBERNETES_SERVICE_HOST"):
        return ConnectionSource.IN_CLUSTER
    return ConnectionSource.DEFAULT


def load_config() -> PodwatchConfig:
    """Load configuration from PODWATCH_* environment variables."""
    refresh_interval = _env_int("DEFAULT_REFRESH_INTERVAL_MS", DEFAULT_REFRESH_INTERVAL_MS, min_val=1000)
    return PodwatchConfig(
        cluster=ClusterConfig(
            kubeconfig=_env("KUBECONFIG", os.environ.get("KUBECONFIG", "")),
            request_timeout=_env_float("REQUEST_TIMEOUT", 10.0, min_val=1.0, max_val=120.0),
            restore_annotation=_env("RESTORE_ANNOTATION", "podwatch.io/previous-replicas"),
        ),
        monitor=MonitorConfig(
            namespaces=parse_namespaces(_env("NAMESPACES", _DEFAULT_NAMESPACES), refresh_interval),
            poll_interval=_env_float("POLL_INTERVAL", 5.0, min_val=1.0, max_val=300.0),
            broadcast_interval=_env_float("BROADCAST_INTERVAL", 5.0, min_val=1.0, max_val=300.0),
        ),
        api=APIConfig(
            host=_env("API_HOST", "0.0.0.0"),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
