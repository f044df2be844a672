"""Shared fixtures: a fake cluster wired to real store, registry and services."""

from __future__ import annotations

import pytest

from podwatch.actions.executor import ActionExecutor
from podwatch.api.facade import QueryFacade
from podwatch.broadcast.broadcaster import Broadcaster
from podwatch.models.pods import NamespaceConfig
from podwatch.poller.poller import Poller
from podwatch.state.registry import NamespaceRegistry
from podwatch.state.store import StateStore
from tests.fakes import FakeClusterClient, make_deployment, make_raw_pod


@pytest.fixture
def cluster() -> FakeClusterClient:
    return FakeClusterClient(
        pods={
            "default": [
                make_raw_pod("web-1", "default"),
                make_raw_pod("web-2", "default", phase="Pending", ready=False),
            ],
            "kube-system": [make_raw_pod("coredns-1", "kube-system", restarts=(1, 2))],
        },
        deployments={
            "default": [make_deployment("web", 2), make_deployment("worker", 0)],
            "kube-system": [make_deployment("coredns", 1)],
        },
    )


@pytest.fixture
def registry() -> NamespaceRegistry:
    return NamespaceRegistry([NamespaceConfig("default"), NamespaceConfig("kube-system")])


@pytest.fixture
def store() -> StateStore:
    return StateStore()


@pytest.fixture
def poller(cluster: FakeClusterClient, registry: NamespaceRegistry, store: StateStore) -> Poller:
    return Poller(cluster, registry, store)


@pytest.fixture
def executor(cluster: FakeClusterClient, store: StateStore) -> ActionExecutor:
    return ActionExecutor(cluster, store)


@pytest.fixture
def broadcaster(store: StateStore, registry: NamespaceRegistry, cluster: FakeClusterClient) -> Broadcaster:
    return Broadcaster(store, registry, cluster)


@pytest.fixture
def facade(
    store: StateStore,
    registry: NamespaceRegistry,
    cluster: FakeClusterClient,
    executor: ActionExecutor,
    broadcaster: Broadcaster,
) -> QueryFacade:
    return QueryFacade(store, registry, cluster, executor, broadcaster)
