"""Translate start/stop/restart intents into cluster mutations.

start    -- scale deployments currently at 0 replicas back up
stop     -- scale deployments with replicas > 0 down to 0
restart  -- delete the mirrored pods; their controllers recreate them

Mutations run sequentially. Within one namespace the first failed call
aborts the branch; across a bulk action each namespace is isolated.
"""

from __future__ import annotations

from typing import Any

import structlog

from podwatch.cluster.base import ClusterClient, RawObject
from podwatch.errors import ActionError, BulkItemError, ConnectivityError
from podwatch.models.actions import (
    ActionResult,
    ActionType,
    BulkActionResult,
    BulkError,
    PodAction,
)
from podwatch.observability.metrics import actions_total
from podwatch.state.store import StateStore

_log = structlog.get_logger(component="actions.executor")

_NOT_CONNECTED = "Not connected to cluster"


def _name(obj: RawObject) -> str:
    return str((obj.get("metadata") or {}).get("name") or "")


def _replicas(deployment: RawObject) -> int:
    return int((deployment.get("spec") or {}).get("replicas") or 0)


def _matches(name: str, pod_name: str | None) -> bool:
    return not pod_name or pod_name in name


class ActionExecutor:
    """Executes PodActions against the cluster.

    Args:
        cluster:            Cluster client used for every mutation.
        store:              Mirror consulted for ``restart`` targets.
        restore_annotation: Deployment annotation that remembers the replica
                            count a ``stop`` scaled away from.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        store: StateStore,
        restore_annotation: str = "podwatch.io/previous-replicas",
    ) -> None:
        self._cluster = cluster
        self._store = store
        self._restore_annotation = restore_annotation

    async def execute(self, action: PodAction) -> ActionResult:
        """Run *action*; failures come back as ``success=False``, never raised."""
        try:
            result = await self._run(action)
        except ConnectivityError as exc:
            result = self._failure(action, str(exc))
        except ActionError as exc:
            _log.error(
                "action failed",
                action=action.action.value,
                namespace=action.namespace,
                pod_name=action.pod_name or "all",
                error=str(exc),
            )
            result = self._failure(action, str(exc), exc.affected)

        actions_total.labels(action=action.action.value, success=str(result.success).lower()).inc()
        return result

    async def execute_bulk(self, action: ActionType, namespaces: list[str]) -> BulkActionResult:
        """Apply *action* to each namespace in turn, isolating per-namespace failures."""
        bulk = BulkActionResult(action=action, namespaces=list(namespaces))
        _log.info("bulk action started", action=action.value, namespaces=namespaces)

        for namespace in namespaces:
            single = PodAction(action=action, namespace=namespace)
            try:
                result = await self._run(single)
            except Exception as exc:  # noqa: BLE001
                item = BulkItemError(namespace, exc)
                _log.warning("bulk action namespace failed", action=action.value, namespace=namespace, error=str(item))
                actions_total.labels(action=action.value, success="false").inc()
                bulk.errors.append(BulkError(namespace=item.namespace, error=str(item)))
                continue
            actions_total.labels(action=action.value, success="true").inc()
            bulk.results.append(result)

        _log.info(
            "bulk action completed",
            action=action.value,
            total=bulk.total,
            successful=bulk.successful,
            failed=bulk.failed,
        )
        return bulk

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    async def _run(self, action: PodAction) -> ActionResult:
        """Dispatch *action*; raises ConnectivityError or ActionError."""
        if not self._cluster.connected:
            raise ConnectivityError(_NOT_CONNECTED)
        if action.action is ActionType.START:
            return await self._start(action)
        if action.action is ActionType.STOP:
            return await self._stop(action)
        return await self._restart(action)

    async def _start(self, action: PodAction) -> ActionResult:
        affected: list[str] = []
        try:
            for deployment in await self._cluster.list_deployments(action.namespace):
                name = _name(deployment)
                if not _matches(name, action.pod_name) or _replicas(deployment) != 0:
                    continue
                await self._cluster.patch_deployment_replicas(
                    name, action.namespace, self._target_replicas(deployment, action)
                )
                affected.append(name)
        except Exception as exc:  # noqa: BLE001
            raise ActionError(f"Failed to start pods: {exc}", affected) from exc

        return self._success(action, f"Started {len(affected)} deployments in namespace {action.namespace}", affected)

    async def _stop(self, action: PodAction) -> ActionResult:
        affected: list[str] = []
        try:
            for deployment in await self._cluster.list_deployments(action.namespace):
                name = _name(deployment)
                current = _replicas(deployment)
                if not _matches(name, action.pod_name) or current <= 0:
                    continue
                await self._cluster.patch_deployment_replicas(
                    name,
                    action.namespace,
                    0,
                    annotations={self._restore_annotation: str(current)},
                )
                affected.append(name)
        except Exception as exc:  # noqa: BLE001
            raise ActionError(f"Failed to stop pods: {exc}", affected) from exc

        return self._success(action, f"Stopped {len(affected)} deployments in namespace {action.namespace}", affected)

    async def _restart(self, action: PodAction) -> ActionResult:
        targets = [p for p in self._store.pods_in(action.namespace) if _matches(p.name, action.pod_name)]
        affected: list[str] = []
        try:
            for pod in targets:
                await self._cluster.delete_pod(pod.name, action.namespace)
                affected.append(pod.name)
        except Exception as exc:  # noqa: BLE001
            raise ActionError(f"Failed to restart pods: {exc}", affected) from exc

        return self._success(action, f"Restarted {len(affected)} pods in namespace {action.namespace}", affected)

    def _target_replicas(self, deployment: RawObject, action: PodAction) -> int:
        """Caller-supplied count, else the restore annotation, else 1."""
        if action.replicas is not None and action.replicas >= 1:
            return action.replicas
        annotations: dict[str, Any] = (deployment.get("metadata") or {}).get("annotations") or {}
        try:
            restored = int(annotations.get(self._restore_annotation, ""))
        except (TypeError, ValueError):
            return 1
        return max(restored, 1)

    @staticmethod
    def _success(action: PodAction, message: str, affected: list[str]) -> ActionResult:
        return ActionResult(
            success=True,
            message=message,
            action=action.action,
            namespace=action.namespace,
            pod_name=action.pod_name,
            affected=affected,
        )

    @staticmethod
    def _failure(action: PodAction, message: str, affected: list[str] | None = None) -> ActionResult:
        return ActionResult(
            success=False,
            message=message,
            action=action.action,
            namespace=action.namespace,
            pod_name=action.pod_name,
            affected=list(affected or []),
        )
