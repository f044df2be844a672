"""kubernetes-asyncio implementation of ClusterClient."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

import aiohttp
import structlog

from podwatch.cluster.base import ClusterClient, RawObject
from podwatch.config import ConnectionSource, select_connection_source
from podwatch.errors import ClusterAPIError, ConnectivityError
from podwatch.observability.metrics import cluster_connected

_log = structlog.get_logger(component="cluster.kube")

_T = TypeVar("_T")


class KubernetesClusterClient(ClusterClient):
    """Talks to the API server through a private kubernetes-asyncio ApiClient.

    Credentials are resolved on every ``connect`` so that a cluster that was
    unreachable at startup is picked up on a later poll cycle. Transport
    failures mark the client disconnected; API error statuses do not.

    Args:
        kubeconfig:      Explicit kubeconfig path; empty means auto-detect.
        request_timeout: Per-call timeout in seconds.
    """

    def __init__(self, kubeconfig: str = "", request_timeout: float = 10.0) -> None:
        self._kubeconfig = kubeconfig
        self._timeout = request_timeout
        self._connected = False
        self._api_client: Any = None
        self._core_v1: Any = None
        self._apps_v1: Any = None

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        source = select_connection_source(self._kubeconfig)
        try:
            await self._load(source)
        except Exception as exc:
            _log.error("cluster client configuration failed", source=source.value, error=str(exc))
            self._set_connected(False)
            return False

        ok = await self.probe()
        if ok:
            _log.info("connected to cluster", source=source.value)
        else:
            _log.error("cluster unreachable", source=source.value)
        return ok

    async def probe(self) -> bool:
        if self._core_v1 is None:
            self._set_connected(False)
            return False
        try:
            await asyncio.wait_for(
                self._core_v1.list_namespace(limit=1, _request_timeout=self._timeout),
                timeout=self._timeout,
            )
        except Exception as exc:
            _log.warning("cluster probe failed", error=str(exc))
            self._set_connected(False)
            return False
        self._set_connected(True)
        return True

    async def list_pods(self, namespace: str) -> list[RawObject]:
        core_v1 = self._require(self._core_v1)
        result = await self._call(core_v1.list_namespaced_pod(namespace, _request_timeout=self._timeout))
        return self._items(result)

    async def list_deployments(self, namespace: str) -> list[RawObject]:
        apps_v1 = self._require(self._apps_v1)
        result = await self._call(apps_v1.list_namespaced_deployment(namespace, _request_timeout=self._timeout))
        return self._items(result)

    async def patch_deployment_replicas(
        self,
        name: str,
        namespace: str,
        replicas: int,
        annotations: dict[str, str] | None = None,
    ) -> None:
        apps_v1 = self._require(self._apps_v1)
        body: dict[str, Any] = {"spec": {"replicas": replicas}}
        if annotations:
            body["metadata"] = {"annotations": dict(annotations)}
        await self._call(
            apps_v1.patch_namespaced_deployment(name, namespace, body, _request_timeout=self._timeout)
        )

    async def delete_pod(self, name: str, namespace: str) -> None:
        core_v1 = self._require(self._core_v1)
        await self._call(core_v1.delete_namespaced_pod(name, namespace, _request_timeout=self._timeout))

    async def close(self) -> None:
        if self._api_client is None:
            return
        try:
            await self._api_client.close()
        except Exception as exc:
            _log.debug("k8s client close raised (non-fatal)", error=str(exc))
        self._api_client = None
        self._core_v1 = None
        self._apps_v1 = None
        self._set_connected(False)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(self, source: ConnectionSource) -> None:
        # Import lazily so tests never touch kubernetes-asyncio's config loaders.
        from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
        from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]

        await self.close()
        configuration = k8s_client.Configuration()
        if source is ConnectionSource.KUBECONFIG_FILE:
            await k8s_config.load_kube_config(config_file=self._kubeconfig, client_configuration=configuration)
        elif source is ConnectionSource.IN_CLUSTER:
            k8s_config.load_incluster_config(client_configuration=configuration)
        else:
            await k8s_config.load_kube_config(client_configuration=configuration)

        self._api_client = k8s_client.ApiClient(configuration=configuration)
        self._core_v1 = k8s_client.CoreV1Api(self._api_client)
        self._apps_v1 = k8s_client.AppsV1Api(self._api_client)

    def _require(self, api: _T | None) -> _T:
        if api is None or not self._connected:
            raise ConnectivityError("Not connected to cluster")
        return api

    async def _call(self, coro: Awaitable[_T]) -> _T:
        from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except ApiException as exc:
            raise ClusterAPIError(f"{exc.status} {exc.reason}", status=exc.status) from exc
        except (TimeoutError, aiohttp.ClientError, OSError) as exc:
            self._set_connected(False)
            raise ConnectivityError(str(exc) or type(exc).__name__) from exc

    def _items(self, result: Any) -> list[RawObject]:
        serialised = self._api_client.sanitize_for_serialization(result)
        return list(serialised.get("items") or [])

    def _set_connected(self, value: bool) -> None:
        if value != self._connected:
            _log.info("cluster connectivity changed", connected=value)
        self._connected = value
        cluster_connected.set(1 if value else 0)
