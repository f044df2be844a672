"""podwatch: pod state mirror, lifecycle actions and real-time fan-out for Kubernetes."""

__version__ = "0.1.0"
