"""Tests for KubernetesClusterClient error mapping, serialisation and loading.

The generated API objects are replaced with small async stubs; the
kubernetes-asyncio config loaders are monkeypatched so no kubeconfig or
service account is ever read.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import aiohttp
import pytest
from kubernetes_asyncio import client as k8s_client
from kubernetes_asyncio import config as k8s_config
from kubernetes_asyncio.client.exceptions import ApiException

from podwatch.cluster.kube import KubernetesClusterClient
from podwatch.config import ConnectionSource
from podwatch.errors import ClusterAPIError, ConnectivityError
from podwatch.poller.convert import convert_pod

# ---------------------------------------------------------------------------
# Stubs
# ---------------------------------------------------------------------------


class _StubCoreV1:
    def __init__(self, exc: Exception | None = None, result: Any = None, delay: float = 0.0) -> None:
        self.exc = exc
        self.result = result
        self.delay = delay
        self.calls: list[tuple[Any, ...]] = []

    async def _respond(self) -> Any:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.result

    async def list_namespace(self, limit: int | None = None, _request_timeout: float | None = None) -> Any:
        self.calls.append(("list_namespace", limit))
        return await self._respond()

    async def list_namespaced_pod(self, namespace: str, _request_timeout: float | None = None) -> Any:
        self.calls.append(("list_namespaced_pod", namespace, _request_timeout))
        return await self._respond()

    async def delete_namespaced_pod(self, name: str, namespace: str, _request_timeout: float | None = None) -> Any:
        self.calls.append(("delete_namespaced_pod", name, namespace))
        return await self._respond()


class _StubAppsV1:
    def __init__(self) -> None:
        self.patches: list[tuple[str, str, dict[str, Any]]] = []

    async def patch_namespaced_deployment(
        self, name: str, namespace: str, body: dict[str, Any], _request_timeout: float | None = None
    ) -> None:
        self.patches.append((name, namespace, body))


def _connected_client(core: _StubCoreV1 | None = None, timeout: float = 1.0) -> KubernetesClusterClient:
    client = KubernetesClusterClient(request_timeout=timeout)
    client._core_v1 = core or _StubCoreV1()
    client._apps_v1 = _StubAppsV1()
    client._api_client = MagicMock()
    client._api_client.sanitize_for_serialization.return_value = {"items": []}
    client._connected = True
    return client


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestCallErrorMapping:
    async def test_api_error_keeps_client_connected(self) -> None:
        client = _connected_client(_StubCoreV1(exc=ApiException(status=403, reason="Forbidden")))

        with pytest.raises(ClusterAPIError) as excinfo:
            await client.list_pods("default")

        assert excinfo.value.status == 403
        assert client.connected is True

    async def test_transport_error_marks_disconnected(self) -> None:
        client = _connected_client(_StubCoreV1(exc=aiohttp.ClientConnectionError("connection refused")))

        with pytest.raises(ConnectivityError):
            await client.list_pods("default")

        assert client.connected is False

    async def test_timeout_marks_disconnected(self) -> None:
        client = _connected_client(_StubCoreV1(result=None, delay=1.0), timeout=0.01)

        with pytest.raises(ConnectivityError):
            await client.list_pods("default")

        assert client.connected is False

    async def test_disconnected_client_issues_no_call(self) -> None:
        core = _StubCoreV1()
        client = _connected_client(core)
        client._connected = False

        with pytest.raises(ConnectivityError, match="Not connected to cluster"):
            await client.delete_pod("web-1", "default")

        assert core.calls == []

    async def test_request_timeout_is_passed_to_the_api(self) -> None:
        core = _StubCoreV1(result=object())
        client = _connected_client(core, timeout=3.0)

        await client.list_pods("default")

        assert core.calls == [("list_namespaced_pod", "default", 3.0)]


# ---------------------------------------------------------------------------
# Request bodies and serialisation
# ---------------------------------------------------------------------------


class TestPatchBody:
    async def test_replicas_only(self) -> None:
        client = _connected_client()

        await client.patch_deployment_replicas("web", "default", 3)

        assert client._apps_v1.patches == [("web", "default", {"spec": {"replicas": 3}})]

    async def test_annotations_are_merged_into_metadata(self) -> None:
        client = _connected_client()

        annotations = {"podwatch.io/previous-replicas": "2"}
        await client.patch_deployment_replicas("web", "default", 0, annotations=annotations)

        body = client._apps_v1.patches[0][2]
        assert body == {
            "spec": {"replicas": 0},
            "metadata": {"annotations": {"podwatch.io/previous-replicas": "2"}},
        }


async def test_items_are_camel_case_json_that_convert_pod_reads() -> None:
    created = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)
    pod_list = k8s_client.V1PodList(
        items=[
            k8s_client.V1Pod(
                metadata=k8s_client.V1ObjectMeta(name="web-1", namespace="default", creation_timestamp=created),
                spec=k8s_client.V1PodSpec(containers=[], node_name="node-1"),
                status=k8s_client.V1PodStatus(
                    phase="Running",
                    pod_ip="10.0.0.7",
                    conditions=[k8s_client.V1PodCondition(type="Ready", status="True")],
                    container_statuses=[
                        k8s_client.V1ContainerStatus(
                            name="app",
                            image="nginx:1.25",
                            image_id="sha256:abc",
                            ready=True,
                            restart_count=2,
                            state=k8s_client.V1ContainerState(running=k8s_client.V1ContainerStateRunning()),
                        )
                    ],
                ),
            )
        ]
    )
    api_client = k8s_client.ApiClient()
    try:
        client = _connected_client(_StubCoreV1(result=pod_list))
        client._api_client = api_client

        items = await client.list_pods("default")
    finally:
        await api_client.close()

    assert items[0]["status"]["containerStatuses"][0]["restartCount"] == 2
    pod = convert_pod(items[0], now=datetime(2026, 3, 1, 12, 0, tzinfo=UTC))
    assert pod.node == "node-1"
    assert pod.ip == "10.0.0.7"
    assert pod.ready is True
    assert pod.restarts == 2
    assert pod.age == "2h"
    assert pod.containers[0].state == "Running"


# ---------------------------------------------------------------------------
# Credential loading and probing
# ---------------------------------------------------------------------------


class TestLoad:
    @pytest.fixture
    def loaders(self, monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict[str, Any]]]:
        calls: list[tuple[str, dict[str, Any]]] = []

        async def fake_load_kube_config(**kwargs: Any) -> None:
            calls.append(("kube_config", kwargs))

        def fake_load_incluster_config(**kwargs: Any) -> None:
            calls.append(("incluster", kwargs))

        monkeypatch.setattr(k8s_config, "load_kube_config", fake_load_kube_config)
        monkeypatch.setattr(k8s_config, "load_incluster_config", fake_load_incluster_config)
        return calls

    async def test_explicit_file(self, loaders: list[tuple[str, dict[str, Any]]]) -> None:
        client = KubernetesClusterClient(kubeconfig="/tmp/kube.yaml")
        try:
            await client._load(ConnectionSource.KUBECONFIG_FILE)
        finally:
            await client.close()

        assert [name for name, _ in loaders] == ["kube_config"]
        assert loaders[0][1]["config_file"] == "/tmp/kube.yaml"

    async def test_in_cluster(self, loaders: list[tuple[str, dict[str, Any]]]) -> None:
        client = KubernetesClusterClient()
        try:
            await client._load(ConnectionSource.IN_CLUSTER)
        finally:
            await client.close()

        assert [name for name, _ in loaders] == ["incluster"]

    async def test_default_discovery(self, loaders: list[tuple[str, dict[str, Any]]]) -> None:
        client = KubernetesClusterClient()
        try:
            await client._load(ConnectionSource.DEFAULT)
        finally:
            await client.close()

        assert [name for name, _ in loaders] == ["kube_config"]
        assert "config_file" not in loaders[0][1]

    async def test_loader_failure_makes_connect_return_false(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def broken_loader(**_kwargs: Any) -> None:
            raise k8s_config.ConfigException("Invalid kube-config file")

        monkeypatch.setattr(k8s_config, "load_kube_config", broken_loader)
        client = KubernetesClusterClient(kubeconfig="/tmp/missing.yaml")

        assert await client.connect() is False
        assert client.connected is False


class TestProbe:
    async def test_probe_success_marks_connected(self) -> None:
        client = _connected_client(_StubCoreV1(result=object()))
        client._connected = False

        assert await client.probe() is True
        assert client.connected is True

    async def test_probe_failure_marks_disconnected(self) -> None:
        client = _connected_client(_StubCoreV1(exc=OSError("no route to host")))

        assert await client.probe() is False
        assert client.connected is False

    async def test_probe_without_loaded_client(self) -> None:
        assert await KubernetesClusterClient().probe() is False
