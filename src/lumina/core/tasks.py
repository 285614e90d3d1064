"""Tracked background tasks owned by the session controller."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskTracker:
    """Keeps strong references to spawned tasks and logs their failures."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task: object) -> bool:
        return task in self._tasks

    def spawn(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """Schedule a coroutine on the running event loop."""
        task: asyncio.Task[T] = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._discard)
        task.add_done_callback(_log_exception)
        return task

    def cancel_all(self) -> None:
        """Cancel all tracked outstanding tasks except the current one."""
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        for task in list(self._tasks):
            if task is current:
                continue
            task.cancel()

    def _discard(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)


def _log_exception(task: asyncio.Task[Any]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Unhandled exception in background task", exc_info=exc)
