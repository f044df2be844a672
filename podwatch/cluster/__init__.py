"""Cluster control-plane access.

Exposes:
    ClusterClient            -- Abstract capability interface (list/patch/delete/probe).
    KubernetesClusterClient  -- kubernetes-asyncio implementation.
"""

from podwatch.cluster.base import ClusterClient, RawObject
from podwatch.cluster.kube import KubernetesClusterClient

__all__ = ["ClusterClient", "KubernetesClusterClient", "RawObject"]
