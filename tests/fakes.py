"""In-memory test doubles shared by unit and integration tests."""

from __future__ import annotations

import copy
from datetime import UTC, datetime, timedelta
from typing import Any

from podwatch.broadcast.broadcaster import Subscriber
from podwatch.cluster.base import ClusterClient, RawObject
from podwatch.errors import ClusterAPIError, ConnectivityError

_NOW = datetime.now(UTC)


def make_raw_pod(
    name: str = "web-7b4f8c6d-x2kj",
    namespace: str = "default",
    phase: str | None = "Running",
    ready: bool = True,
    restarts: tuple[int, ...] = (0,),
    node: str | None = "node-1",
    ip: str | None = "10.0.0.12",
    created_at: datetime | None = None,
    labels: dict[str, str] | None = None,
) -> RawObject:
    """Build a raw pod in the API server's JSON shape."""
    created = created_at or (_NOW - timedelta(hours=2))
    status: dict[str, Any] = {
        "conditions": [{"type": "Ready", "status": "True" if ready else "False"}],
        "containerStatuses": [
            {
                "name": f"c{i}",
                "ready": ready,
                "restartCount": count,
                "image": "nginx:1.25",
                "state": {"running": {"startedAt": created.isoformat()}},
            }
            for i, count in enumerate(restarts)
        ],
    }
    if phase is not None:
        status["phase"] = phase
    if ip is not None:
        status["podIP"] = ip
    spec: dict[str, Any] = {}
    if node is not None:
        spec["nodeName"] = node
    return {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "creationTimestamp": created.isoformat(),
            "labels": labels or {"app": name.split("-")[0]},
        },
        "spec": spec,
        "status": status,
    }


def make_deployment(name: str, replicas: int, annotations: dict[str, str] | None = None) -> RawObject:
    return {
        "metadata": {"name": name, "annotations": dict(annotations or {})},
        "spec": {"replicas": replicas},
    }


class FakeClusterClient(ClusterClient):
    """ClusterClient backed by dicts; records every mutation in ``calls``.

    ``failing_namespaces`` makes every call for that namespace raise
    ClusterAPIError. ``raise_on[(method, namespace)]`` raises the given
    exception from that one call. ``reachable=False`` makes ``connect`` fail.
    """

    def __init__(
        self,
        pods: dict[str, list[RawObject]] | None = None,
        deployments: dict[str, list[RawObject]] | None = None,
        connected: bool = True,
        reachable: bool = True,
    ) -> None:
        self.pods = pods or {}
        self.deployments = deployments or {}
        self._connected = connected
        self.reachable = reachable
        self.failing_namespaces: set[str] = set()
        self.raise_on: dict[tuple[str, str], Exception] = {}
        self.fail_patch_after: int | None = None
        self.calls: list[tuple[Any, ...]] = []
        self.connect_attempts = 0
        self.closed = False

    @property
    def connected(self) -> bool:
        return self._connected

    def disconnect(self) -> None:
        self._connected = False

    async def connect(self) -> bool:
        self.connect_attempts += 1
        self._connected = self.reachable
        return self._connected

    async def probe(self) -> bool:
        return self._connected

    def _check(self, namespace: str, method: str = "") -> None:
        if (method, namespace) in self.raise_on:
            raise self.raise_on[(method, namespace)]
        if not self._connected:
            raise ConnectivityError("Not connected to cluster")
        if namespace in self.failing_namespaces:
            raise ClusterAPIError(f'namespaces "{namespace}" is forbidden', status=403)

    async def list_pods(self, namespace: str) -> list[RawObject]:
        self._check(namespace, "list_pods")
        self.calls.append(("list_pods", namespace))
        return copy.deepcopy(self.pods.get(namespace, []))

    async def list_deployments(self, namespace: str) -> list[RawObject]:
        self._check(namespace, "list_deployments")
        self.calls.append(("list_deployments", namespace))
        return copy.deepcopy(self.deployments.get(namespace, []))

    async def patch_deployment_replicas(
        self,
        name: str,
        namespace: str,
        replicas: int,
        annotations: dict[str, str] | None = None,
    ) -> None:
        self._check(namespace, "patch")
        patches = sum(1 for c in self.calls if c[0] == "patch")
        if self.fail_patch_after is not None and patches >= self.fail_patch_after:
            raise ClusterAPIError("conflict", status=409)
        self.calls.append(("patch", namespace, name, replicas, annotations))
        for deployment in self.deployments.get(namespace, []):
            if deployment["metadata"]["name"] == name:
                deployment["spec"]["replicas"] = replicas
                if annotations:
                    deployment["metadata"].setdefault("annotations", {}).update(annotations)

    async def delete_pod(self, name: str, namespace: str) -> None:
        self._check(namespace, "delete")
        self.calls.append(("delete", namespace, name))
        self.pods[namespace] = [p for p in self.pods.get(namespace, []) if p["metadata"]["name"] != name]

    async def close(self) -> None:
        self.closed = True

    def mutations(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] in ("patch", "delete")]


class RecordingSubscriber(Subscriber):
    """Subscriber that keeps every event it receives; ``fail=True`` makes send raise."""

    def __init__(self, subscriber_id: str = "sub-1", fail: bool = False) -> None:
        self._id = subscriber_id
        self.fail = fail
        self.events: list[tuple[str, dict[str, object]]] = []

    @property
    def subscriber_id(self) -> str:
        return self._id

    async def send(self, event: str, data: dict[str, object]) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.events.append((event, data))

    def names(self) -> list[str]:
        return [e for e, _ in self.events]
