"""Session state machine — the single source of truth for what is shown."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from lumina.core.stream import StreamBuffer
from lumina.models.search import SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """Nothing to show; the launcher is waiting for input."""


@dataclass(frozen=True)
class Loading:
    token: int


@dataclass(frozen=True)
class Results:
    results: tuple[SearchResult, ...] = ()
    selected_index: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.results

    @property
    def selected(self) -> SearchResult | None:
        if 0 <= self.selected_index < len(self.results):
            return self.results[self.selected_index]
        return None


@dataclass(frozen=True)
class Streaming:
    transcript: str = ""
    is_complete: bool = False


@dataclass(frozen=True)
class Error:
    message: str


SessionState = Idle | Loading | Results | Streaming | Error
StateListener = Callable[[SessionState], None]


def clamp_index(index: int, length: int) -> int:
    """Clamp ``index`` into ``[0, length)``; 0 for an empty list."""
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


class SessionStateMachine:
    """Explicit FSM over :data:`SessionState`.

    Search replies are matched by request token: only a reply carrying the
    most recently issued token while in ``Loading`` is applied. Every other
    reply is stale and dropped without a transition.
    """

    def __init__(self) -> None:
        self._state: SessionState = Idle()
        self._tokens = itertools.count(1)
        self._current_token = 0
        self._buffer = StreamBuffer()
        self._stream_live = False
        self._listeners: list[StateListener] = []

    # ── Observation ──

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_token(self) -> int:
        return self._current_token

    @property
    def buffer(self) -> StreamBuffer:
        return self._buffer

    @property
    def transcript_pending(self) -> bool:
        """True while an AI answer is on screen (streaming or finished)."""
        return isinstance(self._state, Streaming)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, state: SessionState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed")

    # ── Search path ──

    def invalidate(self) -> int:
        """Issue a fresh token without a transition, making in-flight replies stale."""
        self._current_token = next(self._tokens)
        return self._current_token

    def begin_search(self) -> int:
        token = self.invalidate()
        self._buffer.reset()
        self._set(Loading(token))
        return token

    def is_current(self, token: int) -> bool:
        return token == self._current_token and self._state == Loading(token)

    def apply_search_reply(self, token: int, results: Sequence[SearchResult]) -> bool:
        if not self.is_current(token):
            logger.debug("Dropping stale search reply %d (current %d)", token, self._current_token)
            return False
        self._set(Results(tuple(results), 0))
        return True

    def apply_search_failure(self, token: int, message: str) -> bool:
        if not self.is_current(token):
            return False
        logger.warning("Search failed: %s", message)
        self._set(Results(()))
        return True

    def move_selection(self, delta: int) -> bool:
        state = self._state
        if not isinstance(state, Results) or state.is_empty:
            return False
        index = clamp_index(state.selected_index + delta, len(state.results))
        if index == state.selected_index:
            return False
        self._set(Results(state.results, index))
        return True

    def select(self, index: int) -> bool:
        state = self._state
        if not isinstance(state, Results) or state.is_empty:
            return False
        index = clamp_index(index, len(state.results))
        if index != state.selected_index:
            self._set(Results(state.results, index))
        return True

    def query_cleared(self) -> None:
        """Query became empty: back to Idle unless an AI answer is on screen."""
        self.invalidate()
        if self.transcript_pending:
            return
        self._set(Idle())

    def abandon_search(self) -> None:
        """Query left the search path: a pending search ends in Idle."""
        self.invalidate()
        if isinstance(self._state, Loading):
            self._set(Idle())

    # ── Streaming path ──

    def begin_stream(self) -> int:
        token = self.invalidate()
        self._buffer.reset()
        self._stream_live = False
        self._set(Streaming("", False))
        return token

    def mark_stream_live(self, token: int) -> bool:
        """The provider accepted the request for ``token``; its events may now land.

        Fragments and completions arriving before this belong to a previous
        provider stream and are dropped.
        """
        state = self._state
        if token != self._current_token or not isinstance(state, Streaming) or state.is_complete:
            return False
        self._stream_live = True
        return True

    def apply_fragment(self, fragment: str) -> bool:
        state = self._state
        if not isinstance(state, Streaming) or state.is_complete:
            return False
        if not self._stream_live:
            logger.debug("Dropping AI fragment from a previous stream")
            return False
        if not self._buffer.append(fragment):
            return False
        self._set(Streaming(self._buffer.transcript, False))
        return True

    def complete_stream(self) -> bool:
        state = self._state
        if not isinstance(state, Streaming) or state.is_complete:
            return False
        if not self._stream_live:
            return False
        self._buffer.complete()
        self._set(Streaming(self._buffer.transcript, True))
        return True

    def fail_stream(self, message: str) -> None:
        """Show a terminal inline message in place of the answer."""
        self._buffer.reset()
        self._buffer.append(message)
        self._buffer.complete()
        self._set(Streaming(self._buffer.transcript, True))

    def new_query(self) -> bool:
        state = self._state
        if not isinstance(state, Streaming) or not state.is_complete:
            return False
        self._buffer.reset()
        self._set(Idle())
        return True

    # ── Resets ──

    def fail(self, message: str) -> None:
        self.invalidate()
        self._set(Error(message))

    def reset(self) -> None:
        """Escape / successful action: Idle, transcript discarded, token invalidated."""
        self.invalidate()
        self._buffer.reset()
        self._set(Idle())
