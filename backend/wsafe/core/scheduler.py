"""Timer scheduling for escalation re-checks and live-tracking ticks."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], Awaitable[None]]


class TimerHandle(Protocol):
    def cancel(self) -> object: ...


class Scheduler(Protocol):
    """Runs an async callback once after a delay; the handle cancels it."""

    def schedule(self, delay: float, callback: TimerCallback) -> TimerHandle: ...


class AsyncioScheduler:
    """Scheduler backed by tasks on the running event loop.

    Cancelling the handle cancels the task, so a callback that is already
    running is interrupted at its next await.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, delay: float, callback: TimerCallback) -> asyncio.Task:
        async def _run() -> None:
            await asyncio.sleep(delay)
            await callback()

        task = asyncio.get_running_loop().create_task(_run())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Scheduled callback failed", exc_info=exc)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    @property
    def pending(self) -> int:
        return len(self._tasks)
