"""In-memory state: the pod mirror, the namespace registry and snapshots of both."""

from podwatch.state.registry import NamespaceRegistry
from podwatch.state.snapshot import build_snapshot
from podwatch.state.store import StateStore

__all__ = ["NamespaceRegistry", "StateStore", "build_snapshot"]
