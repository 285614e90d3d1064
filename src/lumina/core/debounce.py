"""Debounce scheduler: one settle event per quiet period."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class DebounceScheduler:
    """Coalesces rapid query changes into a single settle callback.

    Every :meth:`touch` cancels the pending timer and starts a new one, so at
    most one timer handle exists. When the timer fires the current query is
    read again from ``query_source`` (it may have been cleared while waiting)
    and ``on_settle`` only runs if it is non-blank.
    """

    def __init__(
        self,
        delay: float,
        query_source: Callable[[], str],
        on_settle: Callable[[str], None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._delay = delay
        self._query_source = query_source
        self._on_settle = on_settle
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def touch(self) -> None:
        """Restart the quiet-period timer."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        query = self._query_source()
        if not query.strip():
            logger.debug("Debounce settled on an empty query, skipping")
            return
        self._on_settle(query)
