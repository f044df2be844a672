"""Snapshot projection shared by the push channel and on-demand pulls."""

from __future__ import annotations

from datetime import UTC, datetime

from podwatch.models.pods import Snapshot
from podwatch.state.registry import NamespaceRegistry
from podwatch.state.store import StateStore


def build_snapshot(store: StateStore, registry: NamespaceRegistry, connected: bool) -> Snapshot:
    return Snapshot(
        pods=store.all_pods(),
        stats=store.stats(registry.names()),
        connected=connected,
        timestamp=datetime.now(tz=UTC),
    )
