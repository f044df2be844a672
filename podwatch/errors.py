"""Error taxonomy for podwatch.

Everything below the poller / action executor boundary is recovered locally
and turned into a structured result or a log line. Only ``RequestError``
is meant to cross the request boundary.
"""

from __future__ import annotations


class PodwatchError(Exception):
    """Base class for all podwatch errors."""


class ClusterError(PodwatchError):
    """A single cluster client call failed."""


class ConnectivityError(ClusterError):
    """The cluster is unreachable (not connected, transport failure, timeout)."""


class ClusterAPIError(ClusterError):
    """The API server answered with an error status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class PartialFetchError(PodwatchError):
    """Listing pods for one namespace failed during a poll cycle."""

    def __init__(self, namespace: str, cause: Exception) -> None:
        super().__init__(f"Failed to fetch pods from namespace {namespace}: {cause}")
        self.namespace = namespace
        self.cause = cause


class ActionError(PodwatchError):
    """A start/stop/restart branch was aborted by a cluster error."""

    def __init__(self, message: str, affected: list[str] | None = None) -> None:
        super().__init__(message)
        self.affected = list(affected or [])


class BulkItemError(PodwatchError):
    """One namespace of a bulk action failed."""

    def __init__(self, namespace: str, cause: Exception) -> None:
        super().__init__(str(cause))
        self.namespace = namespace
        self.cause = cause


class RequestError(PodwatchError):
    """Malformed caller input; the request could not be attempted."""
