"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from podwatch.models.pods import NamespaceConfig


@dataclass
class ClusterConfig:
    """Cluster connection configuration."""

    kubeconfig: str = ""
    request_timeout: float = 10.0
    restore_annotation: str = "podwatch.io/previous-replicas"


@dataclass
class MonitorConfig:
    """Polling and fan-out cadence."""

    namespaces: list[NamespaceConfig] = field(default_factory=list)
    poll_interval: float = 5.0
    broadcast_interval: float = 5.0


@dataclass
class APIConfig:
    """REST API configuration."""

    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class PodwatchConfig:
    """Top-level podwatch configuration."""

    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def to_dict(self) -> dict[str, object]:
        return {
            "cluster": {
                "kubeconfig": self.cluster.kubeconfig,
                "requestTimeout": self.cluster.request_timeout,
                "restoreAnnotation": self.cluster.restore_annotation,
            },
            "monitor": {
                "namespaces": [ns.to_dict() for ns in self.monitor.namespaces],
                "pollInterval": self.monitor.poll_interval,
                "broadcastInterval": self.monitor.broadcast_interval,
            },
            "api": {"host": self.api.host, "port": self.api.port},
            "log": {"level": self.log.level},
        }
