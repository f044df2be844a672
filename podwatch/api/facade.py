"""Request/response surface over the store, registry and action executor.

Reads never touch the cluster. Writes return structured success/failure
payloads; only input that cannot be acted on raises ``RequestError``.
Every action result is relayed to push subscribers once it completes.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

import structlog

from podwatch.actions.executor import ActionExecutor
from podwatch.broadcast.broadcaster import Broadcaster
from podwatch.cluster.base import ClusterClient
from podwatch.errors import RequestError
from podwatch.models.actions import ActionResult, ActionType, BulkActionResult, PodAction
from podwatch.models.pods import MonitoringStats, NamespaceConfig, PodRecord, Snapshot, iso
from podwatch.state.registry import NamespaceRegistry
from podwatch.state.snapshot import build_snapshot
from podwatch.state.store import StateStore

_log = structlog.get_logger(component="api.facade")


def parse_action_type(value: str | ActionType) -> ActionType:
    try:
        return ActionType(value)
    except ValueError as exc:
        raise RequestError(f"Unknown action: {value}") from exc


class QueryFacade:
    """Synchronous-style read/write API used by REST routes and the WebSocket handler."""

    def __init__(
        self,
        store: StateStore,
        registry: NamespaceRegistry,
        cluster: ClusterClient,
        executor: ActionExecutor,
        broadcaster: Broadcaster,
    ) -> None:
        self._store = store
        self._registry = registry
        self._cluster = cluster
        self._executor = executor
        self._broadcaster = broadcaster

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._cluster.connected

    def all_pods(self) -> list[PodRecord]:
        return self._store.all_pods()

    def pods_in(self, namespace: str) -> list[PodRecord]:
        return self._store.pods_in(namespace)

    def stats(self) -> MonitoringStats:
        return self._store.stats(self._registry.names())

    def namespaces(self) -> list[NamespaceConfig]:
        return self._registry.all()

    def snapshot(self) -> Snapshot:
        return build_snapshot(self._store, self._registry, self._cluster.connected)

    def health(self) -> dict[str, object]:
        return {
            "success": True,
            "connected": self._cluster.connected,
            "timestamp": iso(datetime.now(tz=UTC)),
            "namespaces": len(self._registry),
            "totalPods": self._store.count,
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def update_namespaces(self, configs: Iterable[NamespaceConfig]) -> list[NamespaceConfig]:
        """Replace the registry wholesale; blank names are rejected."""
        new_configs = list(configs)
        for config in new_configs:
            if not config.name.strip():
                raise RequestError("Namespace name must not be empty")
        self._registry.replace_all(new_configs)
        enabled = [c.name for c in new_configs if c.enabled]
        _log.info("monitoring namespaces updated", enabled=enabled)
        await self._broadcaster.notify(f"Monitoring namespaces updated: {', '.join(enabled) or 'none'}")
        return new_configs

    async def execute_action(self, action: PodAction) -> ActionResult:
        if not action.namespace.strip():
            raise RequestError("Namespace must not be empty")
        if action.replicas is not None and action.replicas < 1:
            raise RequestError("replicas must be >= 1")
        result = await self._executor.execute(action)
        await self._broadcaster.relay_action_result(result)
        return result

    async def start_namespace(self, namespace: str) -> ActionResult:
        return await self.execute_action(PodAction(action=ActionType.START, namespace=namespace))

    async def stop_namespace(self, namespace: str) -> ActionResult:
        return await self.execute_action(PodAction(action=ActionType.STOP, namespace=namespace))

    async def restart_namespace(self, namespace: str) -> ActionResult:
        return await self.execute_action(PodAction(action=ActionType.RESTART, namespace=namespace))

    async def execute_bulk(self, action: ActionType | str, namespaces: list[str]) -> BulkActionResult:
        action_type = parse_action_type(action)
        if any(not ns.strip() for ns in namespaces):
            raise RequestError("Namespace names must not be empty")
        result = await self._executor.execute_bulk(action_type, namespaces)
        await self._broadcaster.relay_bulk_result(result)
        return result

    async def start_namespaces(self, namespaces: list[str]) -> BulkActionResult:
        return await self.execute_bulk(ActionType.START, namespaces)

    async def stop_namespaces(self, namespaces: list[str]) -> BulkActionResult:
        return await self.execute_bulk(ActionType.STOP, namespaces)

    async def restart_namespaces(self, namespaces: list[str]) -> BulkActionResult:
        return await self.execute_bulk(ActionType.RESTART, namespaces)
