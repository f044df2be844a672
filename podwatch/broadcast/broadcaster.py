"""Publish/subscribe fan-out of mirror state to real-time clients.

Subscriber  -- ABC every transport session must implement.
Broadcaster -- Holds live subscribers; pushes periodic snapshots, an
               immediate snapshot on subscribe, and action results.
               A failing subscriber is dropped without affecting the others.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime

import structlog

from podwatch.cluster.base import ClusterClient
from podwatch.models.actions import ActionResult, BulkActionResult
from podwatch.models.pods import iso
from podwatch.observability.metrics import broadcasts_total, subscribers
from podwatch.state.registry import NamespaceRegistry
from podwatch.state.snapshot import build_snapshot
from podwatch.state.store import StateStore

_log = structlog.get_logger(component="broadcast")

PODS_UPDATE = "pods-update"
ACTION_RESULT = "action-result"
BULK_ACTION_RESULT = "bulk-action-result"
NOTIFICATION = "notification"


class Subscriber(ABC):
    """A live push-channel session."""

    @property
    @abstractmethod
    def subscriber_id(self) -> str:
        """Stable identifier used in logs."""

    @abstractmethod
    async def send(self, event: str, data: dict[str, object]) -> None:
        """Deliver one event. Raising marks the subscriber dead."""


class Broadcaster:
    """Republishes StateStore snapshots without re-querying the cluster."""

    def __init__(self, store: StateStore, registry: NamespaceRegistry, cluster: ClusterClient) -> None:
        self._store = store
        self._registry = registry
        self._cluster = cluster
        self._subscribers: dict[str, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def snapshot(self) -> dict[str, object]:
        return build_snapshot(self._store, self._registry, self._cluster.connected).to_dict()

    async def subscribe(self, subscriber: Subscriber) -> None:
        """Register *subscriber* and push it one snapshot right away."""
        self._subscribers[subscriber.subscriber_id] = subscriber
        subscribers.set(len(self._subscribers))
        _log.info("subscriber connected", subscriber=subscriber.subscriber_id, total=len(self._subscribers))
        await self._send_one(subscriber, PODS_UPDATE, self.snapshot())

    def unsubscribe(self, subscriber: Subscriber) -> None:
        if self._subscribers.pop(subscriber.subscriber_id, None) is None:
            return
        subscribers.set(len(self._subscribers))
        _log.info("subscriber disconnected", subscriber=subscriber.subscriber_id, total=len(self._subscribers))

    async def tick(self) -> int:
        """Periodic snapshot push. Returns the number of subscribers reached."""
        if not self._subscribers:
            return 0
        return await self.publish(PODS_UPDATE, self.snapshot())

    async def relay_action_result(self, result: ActionResult) -> int:
        return await self.publish(ACTION_RESULT, result.to_dict())

    async def relay_bulk_result(self, result: BulkActionResult) -> int:
        return await self.publish(BULK_ACTION_RESULT, result.to_dict())

    async def notify(self, message: str, level: str = "info") -> int:
        return await self.publish(
            NOTIFICATION,
            {"message": message, "type": level, "timestamp": iso(datetime.now(tz=UTC))},
        )

    async def publish(self, event: str, data: dict[str, object]) -> int:
        """Send *event* to every current subscriber; returns deliveries that succeeded."""
        delivered = 0
        for subscriber in list(self._subscribers.values()):
            if await self._send_one(subscriber, event, data):
                delivered += 1
        broadcasts_total.labels(event=event).inc()
        return delivered

    async def _send_one(self, subscriber: Subscriber, event: str, data: dict[str, object]) -> bool:
        try:
            await subscriber.send(event, data)
        except Exception as exc:  # noqa: BLE001
            _log.warning(
                "subscriber send failed; dropping",
                subscriber=subscriber.subscriber_id,
                push_event=event,
                error=str(exc),
            )
            self.unsubscribe(subscriber)
            return False
        return True
