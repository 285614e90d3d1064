"""Query session controller — wires input, search, streaming and actions."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from result import Ok, Result

from lumina.config import Config
from lumina.core import events
from lumina.core.debounce import DebounceScheduler
from lumina.core.dispatcher import ActionDispatcher
from lumina.core.navigation import Command, KeyEvent, KeyRouter, NavigationController
from lumina.core.state import SessionState, SessionStateMachine, Streaming
from lumina.core.tasks import TaskTracker
from lumina.models.settings import Settings

if TYPE_CHECKING:
    from lumina.core.events import EventBus, Subscription
    from lumina.core.protocols import Backend
    from lumina.core.state import StateListener

logger = logging.getLogger(__name__)


class QuerySessionController:
    """Owns the query, the session state and the answer stream.

    All mutation happens on the event loop thread through the handlers
    below. Replies from collaborators are only applied when they still
    match the current request token, so no locking is needed.
    """

    def __init__(
        self,
        backend: Backend,
        bus: EventBus,
        config: Config | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend = backend
        self._bus = bus
        self._config = config or Config()
        self._clock = clock
        self._query = ""
        self._settings: Settings | None = None
        self._settings_open = False
        self._started = False
        self._subscriptions: list[Subscription] = []
        self._query_listeners: list[Callable[[str], None]] = []
        self._settings_listeners: list[Callable[[bool], None]] = []
        self._tasks = TaskTracker()

        self.on_toggle_window: Callable[[], None] | None = None

        self._machine = SessionStateMachine()
        self._router = KeyRouter(self._config.ai_sigil)
        self._navigation = NavigationController(self._machine)
        self._dispatcher = ActionDispatcher(backend, self._machine, self._clear_query)
        self._debounce = DebounceScheduler(
            self._config.debounce_seconds,
            lambda: self._query,
            self._on_settled,
        )

    # ── Observation ──

    @property
    def query(self) -> str:
        return self._query

    @property
    def state(self) -> SessionState:
        return self._machine.state

    @property
    def machine(self) -> SessionStateMachine:
        return self._machine

    @property
    def settings(self) -> Settings | None:
        return self._settings

    @property
    def settings_open(self) -> bool:
        return self._settings_open

    @property
    def started(self) -> bool:
        return self._started

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._machine.subscribe(listener)

    def on_query_changed(self, listener: Callable[[str], None]) -> None:
        self._query_listeners.append(listener)

    def on_settings_toggled(self, listener: Callable[[bool], None]) -> None:
        self._settings_listeners.append(listener)

    # ── Lifecycle ──

    async def start(self) -> None:
        """Subscribe to push events and load settings."""
        if self._started:
            return
        self._started = True
        self._subscriptions = [
            self._bus.subscribe(events.AI_RESPONSE_CHUNK, self._on_chunk),
            self._bus.subscribe(events.AI_RESPONSE_COMPLETE, self._on_complete),
            self._bus.subscribe(events.TOGGLE_WINDOW_EVENT, self._on_toggle),
        ]
        reply = await self._backend.get_config()
        if isinstance(reply, Ok):
            self._settings = reply.ok_value
        else:
            logger.warning("Failed to load config: %s", reply.err_value)

    def stop(self) -> None:
        """Release subscriptions and drop any in-flight work."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
        self._debounce.cancel()
        self._tasks.cancel_all()
        self._machine.invalidate()
        self._started = False

    # ── Input ──

    def set_query(self, text: str) -> None:
        """Handle a query change from the input field."""
        if text == self._query:
            return
        self._query = text
        self._notify_query()
        self._machine.invalidate()
        if not text.strip():
            self._debounce.cancel()
            self._machine.query_cleared()
            return
        if self._router.is_ai_query(text):
            # Sigil queries wait for an explicit Enter.
            self._debounce.cancel()
            self._machine.abandon_search()
            return
        self._debounce.touch()

    def handle_key(self, event: KeyEvent) -> bool:
        """Route a key press. Returns True when the host should suppress its default."""
        routed = self._router.route(
            event, self._machine.state, self._query, settings_open=self._settings_open
        )
        if routed is None:
            return False
        match routed.command:
            case Command.RESET:
                self.close_settings()
                self.escape()
            case Command.MOVE_DOWN:
                self._navigation.move_down()
            case Command.MOVE_UP:
                self._navigation.move_up()
            case Command.COMMIT:
                self.commit()
            case Command.SUBMIT_AI:
                self.submit_ai(self._query)
            case Command.OPEN_SETTINGS:
                self.open_settings()
        return routed.prevent_default

    def escape(self) -> None:
        """Full reset: Idle, empty query, transcript dropped, pending token invalidated."""
        self._debounce.cancel()
        self._clear_query()
        self._machine.reset()

    def commit(self) -> asyncio.Task[bool] | None:
        """Hand the selected result to the action dispatcher."""
        result = self._navigation.selected()
        if result is None:
            return None
        return self._tasks.spawn(self._dispatcher.dispatch(result))

    def activate(self, index: int) -> asyncio.Task[bool] | None:
        """Select the result at ``index`` (e.g. a mouse click) and commit it."""
        if self._settings_open or not self._machine.select(index):
            return None
        return self.commit()

    def copy_transcript(self) -> asyncio.Task[Result[None, str]] | None:
        """Copy the rendered answer of a finished stream to the clipboard."""
        state = self._machine.state
        if not isinstance(state, Streaming) or not state.is_complete:
            return None
        return self._tasks.spawn(self._backend.copy_to_clipboard(self._machine.buffer.rendered()))

    def submit_ai(self, text: str) -> asyncio.Task[bool] | None:
        """Start an AI answer for ``text``, stripping the sigil if present."""
        prompt = text
        if self._router.is_ai_query(prompt):
            prompt = prompt[len(self._config.ai_sigil) :]
        prompt = prompt.strip()
        if not prompt:
            return None
        self._debounce.cancel()
        token = self._dispatcher.begin_ai()
        return self._tasks.spawn(self._dispatcher.request_ai(token, prompt))

    def new_query(self) -> None:
        """Leave a finished answer and start over."""
        self._machine.new_query()

    # ── Settings mode ──

    def open_settings(self) -> None:
        if self._settings_open:
            return
        self._settings_open = True
        self._notify_settings()

    def close_settings(self) -> None:
        if not self._settings_open:
            return
        self._settings_open = False
        self._notify_settings()

    async def save_settings(self, settings: Settings) -> bool:
        reply = await self._backend.save_config(settings)
        if isinstance(reply, Ok):
            self._settings = settings
            self.close_settings()
            return True
        logger.warning("Failed to save config: %s", reply.err_value)
        return False

    def report_error(self, message: str) -> None:
        """Show a host-level error (e.g. the backend failed to start)."""
        self._debounce.cancel()
        self._machine.fail(message)

    # ── Search ──

    def _on_settled(self, query: str) -> None:
        token = self._machine.begin_search()
        logger.debug("Searching %r (token %d)", query, token)
        self._tasks.spawn(self._run_search(token, query))

    async def _run_search(self, token: int, query: str) -> None:
        started = self._clock()
        reply = await self._backend.search(query)
        remaining = self._config.min_loading_seconds - (self._clock() - started)
        if remaining > 0:
            await asyncio.sleep(remaining)
        if isinstance(reply, Ok):
            self._machine.apply_search_reply(token, reply.ok_value)
        else:
            self._machine.apply_search_failure(token, reply.err_value)

    # ── Push events ──

    def _on_chunk(self, payload: Any) -> None:
        if not isinstance(self._machine.state, Streaming):
            logger.debug("Dropping AI fragment outside of a stream")
            return
        self._machine.apply_fragment(str(payload or ""))

    def _on_complete(self, _payload: Any) -> None:
        self._machine.complete_stream()

    def _on_toggle(self, _payload: Any) -> None:
        if self.on_toggle_window is not None:
            self.on_toggle_window()
        else:
            logger.info("Toggle requested but no window is attached")

    # ── Helpers ──

    def _clear_query(self) -> None:
        if not self._query:
            return
        self._query = ""
        self._notify_query()

    def _notify_query(self) -> None:
        for listener in list(self._query_listeners):
            listener(self._query)

    def _notify_settings(self) -> None:
        for listener in list(self._settings_listeners):
            listener(self._settings_open)
