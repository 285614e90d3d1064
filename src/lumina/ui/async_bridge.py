"""Async bridge — qasync event loop integration for PySide6."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable, Coroutine
from typing import Any, ParamSpec, TypeVar

from PySide6.QtWidgets import QApplication
from qasync import QEventLoop

from lumina.core.tasks import TaskTracker

P = ParamSpec("P")
T = TypeVar("T")

_UI_TASKS = TaskTracker()


def create_event_loop(app: QApplication) -> QEventLoop:
    """Create and install a qasync event loop bridging Qt and asyncio."""
    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    return loop


def async_slot(
    func: Callable[P, Coroutine[Any, Any, T]],
) -> Callable[P, None]:
    """Decorator that wraps an async coroutine so it can be used as a Qt slot.

    Usage::

        @async_slot
        async def _on_save_clicked(self) -> None:
            await self._controller.save_settings(self._collect())
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> None:
        _UI_TASKS.spawn(func(*args, **kwargs))

    return wrapper


def schedule(coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
    """Schedule an async coroutine on the running event loop."""
    return _UI_TASKS.spawn(coro)


def cancel_all_tasks() -> None:
    """Cancel all tracked outstanding UI tasks."""
    _UI_TASKS.cancel_all()


def pending_task_count() -> int:
    return len(_UI_TASKS)
