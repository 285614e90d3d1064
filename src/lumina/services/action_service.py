"""Executes committed results against the desktop and the AI service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from lumina.models.search import ActionType, SearchResult
from lumina.services import desktop

if TYPE_CHECKING:
    from lumina.services.ai_service import AiService

logger = logging.getLogger(__name__)


class ActionService:
    """Service for result actions."""

    def __init__(
        self,
        ai_service: AiService,
        *,
        opener: Callable[[str], bool] = desktop.open_path,
        clipboard: Callable[[str], bool] = desktop.copy_to_clipboard,
    ) -> None:
        self._ai = ai_service
        self._opener = opener
        self._clipboard = clipboard

    async def open_path(self, path: str) -> Result[None, str]:
        try:
            opened = self._opener(path)
        except OSError as exc:
            return Err(f"Failed to open {path}: {exc}")
        if not opened:
            return Err(f"Failed to open {path}")
        return Ok(None)

    async def copy_to_clipboard(self, text: str) -> Result[None, str]:
        if not self._clipboard(text):
            return Err("Clipboard unavailable")
        return Ok(None)

    async def ai_request(self, prompt: str) -> Result[None, str]:
        return self._ai.start(prompt)

    async def execute_action(self, result: SearchResult) -> Result[str, str]:
        """Run any result's action and describe the outcome (used by `lumina open`)."""
        match result.action_type:
            case ActionType.OPEN_FILE | ActionType.OPEN_APP | ActionType.OPEN_URL:
                outcome = await self.open_path(result.action_data)
                message = "Opened"
            case ActionType.COPY_TO_CLIPBOARD:
                outcome = await self.copy_to_clipboard(result.action_data)
                message = "Copied to clipboard"
            case ActionType.AI_RESPONSE:
                outcome = await self.ai_request(result.action_data)
                message = "AI response started"
        if isinstance(outcome, Err):
            logger.warning("Action %s failed: %s", result.action_type, outcome.err_value)
            return Err(outcome.err_value)
        return Ok(message)
