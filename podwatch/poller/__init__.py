"""Poll-based synchronisation of the pod mirror."""

from podwatch.poller.convert import convert_pod, format_age
from podwatch.poller.poller import Poller

__all__ = ["Poller", "convert_pod", "format_age"]
