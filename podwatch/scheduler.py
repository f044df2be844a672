"""Independent periodic timers for the poll and broadcast loops."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

_log = structlog.get_logger(component="scheduler")


class PeriodicTask:
    """Calls *fn* every *interval* seconds until stopped.

    An exception from *fn* is logged and the loop keeps going. The first
    call happens after one full interval unless ``run_immediately`` is set.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        fn: Callable[[], Awaitable[Any]],
        run_immediately: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._fn = fn
        self._run_immediately = run_immediately
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _loop(self) -> None:
        if not self._run_immediately:
            await asyncio.sleep(self.interval)
        while True:
            try:
                await self._fn()
            except Exception as exc:  # noqa: BLE001
                _log.error("periodic task failed", task=self.name, error=str(exc))
            self.runs += 1
            await asyncio.sleep(self.interval)


class Scheduler:
    """Owns a set of PeriodicTasks; started on init, stopped on shutdown."""

    def __init__(self) -> None:
        self._tasks: list[PeriodicTask] = []

    @property
    def tasks(self) -> list[PeriodicTask]:
        return list(self._tasks)

    def every(
        self,
        name: str,
        interval: float,
        fn: Callable[[], Awaitable[Any]],
        run_immediately: bool = False,
    ) -> PeriodicTask:
        task = PeriodicTask(name, interval, fn, run_immediately=run_immediately)
        self._tasks.append(task)
        return task

    def start(self) -> None:
        for task in self._tasks:
            task.start()
            _log.info("periodic task started", task=task.name, interval=task.interval)

    async def stop(self) -> None:
        for task in reversed(self._tasks):
            await task.stop()
