"""Prometheus metrics exported at ``/api/v1/metrics``."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

poll_cycles_total = Counter(
    "podwatch_poll_cycles_total",
    "Poll cycles by outcome (completed, skipped_disconnected).",
    ["outcome"],
)

poll_namespace_failures_total = Counter(
    "podwatch_poll_namespace_failures_total",
    "Namespaces whose pod listing failed during a poll cycle.",
    ["namespace"],
)

poll_duration_seconds = Histogram(
    "podwatch_poll_duration_seconds",
    "Wall time of one completed poll cycle.",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

monitored_pods = Gauge(
    "podwatch_monitored_pods",
    "Pods in the mirror after the last poll cycle.",
)

cluster_connected = Gauge(
    "podwatch_cluster_connected",
    "1 when the cluster client is connected, else 0.",
)

actions_total = Counter(
    "podwatch_actions_total",
    "Single-namespace lifecycle actions by type and outcome.",
    ["action", "success"],
)

subscribers = Gauge(
    "podwatch_subscribers",
    "Live push-channel subscribers.",
)

broadcasts_total = Counter(
    "podwatch_broadcasts_total",
    "Events published to subscribers.",
    ["event"],
)
