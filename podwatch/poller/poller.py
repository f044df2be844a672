"""Periodic full refresh of the StateStore from the cluster."""

from __future__ import annotations

import time
from datetime import UTC, datetime

import structlog

from podwatch.cluster.base import ClusterClient
from podwatch.errors import PartialFetchError
from podwatch.models.pods import PodRecord
from podwatch.observability.metrics import (
    monitored_pods,
    poll_cycles_total,
    poll_duration_seconds,
    poll_namespace_failures_total,
)
from podwatch.poller.convert import convert_pod
from podwatch.state.registry import NamespaceRegistry
from podwatch.state.store import StateStore

_log = structlog.get_logger(component="poller")


class Poller:
    """Builds a brand-new pod map per cycle and swaps it into the store.

    A disconnected cluster turns the cycle into a reconnection attempt; the
    fetch resumes on the following tick. A namespace whose listing fails is
    dropped from the new map while the other namespaces proceed.
    """

    def __init__(self, cluster: ClusterClient, registry: NamespaceRegistry, store: StateStore) -> None:
        self._cluster = cluster
        self._registry = registry
        self._store = store

    async def tick(self) -> bool:
        """Run one poll cycle. Returns True when the store was refreshed."""
        if not self._cluster.connected:
            poll_cycles_total.labels(outcome="skipped_disconnected").inc()
            await self._cluster.connect()
            return False

        t_start = time.monotonic()
        pods: dict[str, PodRecord] = {}
        for ns in self._registry.enabled():
            try:
                pods.update(await self._fetch_namespace(ns.name))
            except PartialFetchError as exc:
                poll_namespace_failures_total.labels(namespace=exc.namespace).inc()
                _log.warning("namespace fetch failed", namespace=exc.namespace, error=str(exc.cause))

        previous = self._store.count
        self._store.replace(pods)
        if previous != len(pods):
            _log.info("pod count changed", previous=previous, current=len(pods))

        monitored_pods.set(len(pods))
        poll_duration_seconds.observe(time.monotonic() - t_start)
        poll_cycles_total.labels(outcome="completed").inc()
        return True

    async def _fetch_namespace(self, namespace: str) -> dict[str, PodRecord]:
        """List and convert one namespace; any failure becomes PartialFetchError."""
        try:
            raw_pods = await self._cluster.list_pods(namespace)
            now = datetime.now(tz=UTC)
            records: dict[str, PodRecord] = {}
            for raw in raw_pods:
                record = convert_pod(raw, now=now, namespace=namespace)
                records[record.key] = record
        except Exception as exc:  # noqa: BLE001
            raise PartialFetchError(namespace, exc) from exc
        return records
