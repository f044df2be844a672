"""Core data structures for podwatch."""

from podwatch.models.actions import (
    ActionResult,
    ActionType,
    BulkActionResult,
    BulkError,
    PodAction,
)
from podwatch.models.config import PodwatchConfig
from podwatch.models.pods import (
    ContainerRecord,
    MonitoringStats,
    NamespaceConfig,
    PodPhase,
    PodRecord,
    Snapshot,
)

__all__ = [
    "ActionResult",
    "ActionType",
    "BulkActionResult",
    "BulkError",
    "ContainerRecord",
    "MonitoringStats",
    "NamespaceConfig",
    "PodAction",
    "PodPhase",
    "PodRecord",
    "PodwatchConfig",
    "Snapshot",
]
