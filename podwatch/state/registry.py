"""Ordered set of namespaces the poller watches."""

from __future__ import annotations

from collections.abc import Iterable

from podwatch.models.pods import NamespaceConfig


class NamespaceRegistry:
    """Holds NamespaceConfig entries in insertion order.

    ``replace_all`` overwrites the whole list; callers must include any
    namespace they want to keep. Duplicate names are not rejected.
    """

    def __init__(self, configs: Iterable[NamespaceConfig] = ()) -> None:
        self._configs: tuple[NamespaceConfig, ...] = tuple(configs)

    def replace_all(self, configs: Iterable[NamespaceConfig]) -> None:
        self._configs = tuple(configs)

    def all(self) -> list[NamespaceConfig]:
        return list(self._configs)

    def names(self) -> list[str]:
        return [c.name for c in self._configs]

    def enabled(self) -> list[NamespaceConfig]:
        return [c for c in self._configs if c.enabled]

    def __len__(self) -> int:
        return len(self._configs)
