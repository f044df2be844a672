"""Raw pod -> PodRecord projection.

Pure functions; every default for a missing field is applied here:

    phase        -> "Unknown"
    ready        -> False unless a ``Ready`` condition has status "True"
    creation ts  -> capture time
    container    -> ready False, restartCount 0, image "unknown"
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from podwatch.cluster.base import RawObject
from podwatch.models.pods import ContainerRecord, PodPhase, PodRecord

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


def format_age(created_at: datetime, now: datetime) -> str:
    """Render the largest whole unit of ``now - created_at``: ``3d``, ``5h``, ``12m`` or ``<1m``."""
    seconds = int((now - created_at).total_seconds())
    if seconds >= _DAY:
        return f"{seconds // _DAY}d"
    if seconds >= _HOUR:
        return f"{seconds // _HOUR}h"
    if seconds >= _MINUTE:
        return f"{seconds // _MINUTE}m"
    return "<1m"


def parse_timestamp(value: Any) -> datetime | None:
    """Accept a datetime or an ISO-8601 string; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_pod_ready(status: dict[str, Any]) -> bool:
    for condition in status.get("conditions") or []:
        if condition.get("type") == "Ready":
            return condition.get("status") == "True"
    return False


def container_state(container: dict[str, Any]) -> str:
    """Running > waiting > terminated > unknown."""
    state = container.get("state") or {}
    if state.get("running") is not None:
        return "Running"
    if state.get("waiting") is not None:
        return f"Waiting: {state['waiting'].get('reason') or 'Unknown'}"
    if state.get("terminated") is not None:
        return f"Terminated: {state['terminated'].get('reason') or 'Unknown'}"
    return "Unknown"


def convert_container(container: dict[str, Any]) -> ContainerRecord:
    return ContainerRecord(
        name=str(container.get("name") or "unknown"),
        ready=bool(container.get("ready") or False),
        restart_count=int(container.get("restartCount") or 0),
        state=container_state(container),
        image=str(container.get("image") or "unknown"),
    )


def convert_pod(raw: RawObject, now: datetime | None = None, namespace: str = "unknown") -> PodRecord:
    """Build a PodRecord from a raw pod captured at *now*.

    *namespace* is used only when the raw object carries none.
    """
    captured_at = now or datetime.now(tz=UTC)
    metadata = raw.get("metadata") or {}
    spec = raw.get("spec") or {}
    status = raw.get("status") or {}

    containers = tuple(convert_container(c) for c in status.get("containerStatuses") or [])
    created_at = parse_timestamp(metadata.get("creationTimestamp")) or captured_at

    return PodRecord(
        name=str(metadata.get("name") or "unknown"),
        namespace=str(metadata.get("namespace") or namespace),
        phase=str(status.get("phase") or PodPhase.UNKNOWN.value),
        ready=is_pod_ready(status),
        restarts=sum(c.restart_count for c in containers),
        age=format_age(created_at, captured_at),
        created_at=created_at,
        updated_at=captured_at,
        node=spec.get("nodeName") or None,
        ip=status.get("podIP") or None,
        labels=dict(metadata.get("labels") or {}),
        containers=containers,
    )
