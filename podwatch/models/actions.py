"""Lifecycle action requests and their results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from podwatch.models.pods import iso


class ActionType(StrEnum):
    """Coarse lifecycle intents an operator can issue."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"


@dataclass(frozen=True)
class PodAction:
    """A start/stop/restart request scoped to one namespace.

    ``pod_name`` is a substring filter; when None the action applies to every
    target in the namespace. ``replicas`` optionally pins the scale-up target
    for ``start``.
    """

    action: ActionType
    namespace: str
    pod_name: str | None = None
    replicas: int | None = None


@dataclass
class ActionResult:
    """Outcome of one single-namespace action."""

    success: bool
    message: str
    action: ActionType
    namespace: str
    pod_name: str | None = None
    affected: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def to_dict(self) -> dict[str, object]:
        return {
            "success": self.success,
            "message": self.message,
            "affectedPods": list(self.affected),
            "action": self.action.value,
            "namespace": self.namespace,
            "podName": self.pod_name,
            "timestamp": iso(self.timestamp),
        }


@dataclass(frozen=True)
class BulkError:
    """A namespace whose action raised instead of producing a result."""

    namespace: str
    error: str

    def to_dict(self) -> dict[str, object]:
        return {"namespace": self.namespace, "error": self.error}


@dataclass
class BulkActionResult:
    """Aggregate outcome of an action applied to a list of namespaces."""

    action: ActionType
    namespaces: list[str]
    results: list[ActionResult] = field(default_factory=list)
    errors: list[BulkError] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def total(self) -> int:
        return len(self.namespaces)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def message(self) -> str:
        return f"Bulk {self.action.value} completed on {self.total} namespaces"

    def to_dict(self) -> dict[str, object]:
        return {
            "success": self.success,
            "action": self.action.value,
            "namespaces": list(self.namespaces),
            "message": self.message,
            "results": [
                {
                    "namespace": r.namespace,
                    "success": r.success,
                    "message": r.message,
                    "affectedPods": list(r.affected),
                }
                for r in self.results
            ],
            "errors": [e.to_dict() for e in self.errors],
            "summary": {
                "total": self.total,
                "successful": self.successful,
                "failed": self.failed,
            },
            "timestamp": iso(self.timestamp),
        }
