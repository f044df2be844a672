"""Pod mirror data structures.

Records are immutable: a poll cycle builds brand-new records and the store
swaps them in wholesale. ``to_dict`` renders the wire form (camelCase keys,
ISO-8601 timestamps) shared by the REST API and the push channel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

DEFAULT_REFRESH_INTERVAL_MS = 5000


class PodPhase(StrEnum):
    """Pod phases reported by the cluster."""

    RUNNING = "Running"
    PENDING = "Pending"
    FAILED = "Failed"
    SUCCEEDED = "Succeeded"
    UNKNOWN = "Unknown"


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class ContainerRecord:
    """Status of one container inside a monitored pod."""

    name: str
    ready: bool = False
    restart_count: int = 0
    state: str = "Unknown"  # Running | Waiting: <reason> | Terminated: <reason> | Unknown
    image: str = "unknown"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "ready": self.ready,
            "restartCount": self.restart_count,
            "state": self.state,
            "image": self.image,
        }


@dataclass(frozen=True)
class PodRecord:
    """One monitored pod, as captured by a single poll cycle.

    ``phase`` is copied verbatim from the cluster (``"Unknown"`` when absent),
    so it may hold values outside ``PodPhase``. ``node`` and ``ip`` are None
    until the pod is scheduled / assigned an address.
    """

    name: str
    namespace: str
    phase: str
    ready: bool
    restarts: int
    age: str
    created_at: datetime
    updated_at: datetime
    node: str | None = None
    ip: str | None = None
    labels: dict[str, str] = field(default_factory=dict)
    containers: tuple[ContainerRecord, ...] = ()

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "status": self.phase,
            "phase": self.phase,
            "ready": self.ready,
            "restarts": self.restarts,
            "age": self.age,
            "node": self.node,
            "ip": self.ip,
            "labels": dict(self.labels),
            "containers": [c.to_dict() for c in self.containers],
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


@dataclass(frozen=True)
class NamespaceConfig:
    """A namespace the poller should watch.

    ``refresh_interval`` (milliseconds) is accepted and echoed back but the
    poll cadence is global; it is not enforced per namespace.
    """

    name: str
    enabled: bool = True
    refresh_interval: int | None = DEFAULT_REFRESH_INTERVAL_MS

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "enabled": self.enabled,
            "refreshInterval": self.refresh_interval,
        }


@dataclass(frozen=True)
class MonitoringStats:
    """Aggregate counts derived from the store at call time. Never cached."""

    total_pods: int
    running_pods: int
    pending_pods: int
    failed_pods: int
    last_update: datetime | None
    namespaces: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "totalPods": self.total_pods,
            "runningPods": self.running_pods,
            "pendingPods": self.pending_pods,
            "failedPods": self.failed_pods,
            "lastUpdate": iso(self.last_update),
            "namespaces": list(self.namespaces),
        }


@dataclass(frozen=True)
class Snapshot:
    """The payload published to subscribers and returned by on-demand pulls."""

    pods: list[PodRecord]
    stats: MonitoringStats
    connected: bool
    timestamp: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "pods": [p.to_dict() for p in self.pods],
            "stats": self.stats.to_dict(),
            "connected": self.connected,
            "timestamp": iso(self.timestamp),
        }
