"""Action dispatcher: turns a committed result into one side effect."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from result import Err, Ok

from lumina.models.search import ActionType, SearchResult

if TYPE_CHECKING:
    from lumina.core.protocols import Backend
    from lumina.core.state import SessionStateMachine

logger = logging.getLogger(__name__)

AI_FAILURE_MESSAGE = "⚠️ AI request failed: {error}"


class ActionDispatcher:
    """Runs the effect for a committed result.

    Open/copy effects are fire-and-forget: on success the session resets to
    Idle with an empty query, on failure it is left untouched. AI results
    never reach the open/copy effects; they start a new answer stream.
    Nothing is retried.
    """

    def __init__(
        self,
        backend: Backend,
        machine: SessionStateMachine,
        clear_query: Callable[[], None],
    ) -> None:
        self._backend = backend
        self._machine = machine
        self._clear_query = clear_query

    async def dispatch(self, result: SearchResult) -> bool:
        if result.action_type is ActionType.AI_RESPONSE:
            return await self.start_ai(result.action_data)

        token = self._machine.current_token
        if result.action_type.opens_path:
            reply = await self._backend.open_path(result.action_data)
        else:
            reply = await self._backend.copy_to_clipboard(result.action_data)

        if isinstance(reply, Err):
            logger.warning(
                "%s failed for result %s: %s", result.action_type, result.id, reply.err_value
            )
            return False
        if token != self._machine.current_token:
            logger.debug("Session moved on while %s ran; keeping new state", result.action_type)
            return True
        self._clear_query()
        self._machine.reset()
        return True

    async def start_ai(self, prompt: str) -> bool:
        """Begin a fresh AI answer for ``prompt``."""
        return await self.request_ai(self.begin_ai(), prompt)

    def begin_ai(self) -> int:
        """Drop any previous transcript, enter an empty stream and clear the query."""
        token = self._machine.begin_stream()
        self._clear_query()
        return token

    async def request_ai(self, token: int, prompt: str) -> bool:
        reply = await self._backend.ai_request(prompt)
        if isinstance(reply, Ok):
            self._machine.mark_stream_live(token)
            return True
        logger.warning("AI request failed to start: %s", reply.err_value)
        if token == self._machine.current_token:
            self._machine.fail_stream(AI_FAILURE_MESSAGE.format(error=reply.err_value))
        return False
