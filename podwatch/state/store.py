"""Authoritative in-memory mirror of the monitored pods.

The store never mutates its map in place. ``replace`` installs a new
read-only mapping with a single reference assignment, so a reader holding
the result of ``all_pods`` or ``pods_in`` always sees exactly one poll cycle.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType

from podwatch.models.pods import MonitoringStats, PodPhase, PodRecord


class StateStore:
    """Pods keyed by ``namespace/name``, swapped wholesale every poll cycle."""

    def __init__(self) -> None:
        self._pods: Mapping[str, PodRecord] = MappingProxyType({})
        self._last_updated: datetime | None = None

    @property
    def last_updated(self) -> datetime | None:
        """Time of the last ``replace`` call; None before the first cycle."""
        return self._last_updated

    @property
    def count(self) -> int:
        return len(self._pods)

    def replace(self, pods: Mapping[str, PodRecord]) -> None:
        """Atomically install *pods* as the new mirror."""
        self._pods = MappingProxyType(dict(pods))
        self._last_updated = datetime.now(tz=UTC)

    def all_pods(self) -> list[PodRecord]:
        return list(self._pods.values())

    def pods_in(self, namespace: str) -> list[PodRecord]:
        return [p for p in self._pods.values() if p.namespace == namespace]

    def get(self, namespace: str, name: str) -> PodRecord | None:
        return self._pods.get(f"{namespace}/{name}")

    def stats(self, namespaces: list[str]) -> MonitoringStats:
        """Aggregate counts by a linear scan of the current map."""
        pods = self._pods
        running = pending = failed = 0
        for pod in pods.values():
            if pod.phase == PodPhase.RUNNING:
                running += 1
            elif pod.phase == PodPhase.PENDING:
                pending += 1
            elif pod.phase == PodPhase.FAILED:
                failed += 1
        return MonitoringStats(
            total_pods=len(pods),
            running_pods=running,
            pending_pods=pending,
            failed_pods=failed,
            last_update=self._last_updated,
            namespaces=list(namespaces),
        )
