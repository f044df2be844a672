"""Capability interface the poller and action executor depend on.

Raw records are plain dicts in the Kubernetes JSON shape (camelCase keys,
``metadata`` / ``spec`` / ``status``). Every call either completes or raises
a ``ClusterError``; there are no partial-call semantics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

RawObject = dict[str, Any]


class ClusterClient(ABC):
    """Abstract cluster control-plane client."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """True once ``connect`` succeeded and no transport failure has been seen since."""

    @abstractmethod
    async def connect(self) -> bool:
        """(Re)initialise credentials and probe the API server.

        Never raises; returns the resulting connectivity.
        """

    @abstractmethod
    async def probe(self) -> bool:
        """Cheap connectivity check against an already-initialised client."""

    @abstractmethod
    async def list_pods(self, namespace: str) -> list[RawObject]:
        """Return the raw pods of *namespace*."""

    @abstractmethod
    async def list_deployments(self, namespace: str) -> list[RawObject]:
        """Return the raw deployments of *namespace*."""

    @abstractmethod
    async def patch_deployment_replicas(
        self,
        name: str,
        namespace: str,
        replicas: int,
        annotations: dict[str, str] | None = None,
    ) -> None:
        """Set ``spec.replicas`` (and optionally merge metadata annotations)."""

    @abstractmethod
    async def delete_pod(self, name: str, namespace: str) -> None:
        """Delete one pod; its owning controller is expected to recreate it."""

    async def close(self) -> None:
        """Release transport resources. Optional."""
        return None
