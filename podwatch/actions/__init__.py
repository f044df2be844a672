"""Lifecycle action execution (start / stop / restart, single and bulk)."""

from podwatch.actions.executor import ActionExecutor

__all__ = ["ActionExecutor"]
