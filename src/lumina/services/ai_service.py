"""Streaming AI answers over OpenAI-compatible chat completion APIs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from openai import AsyncOpenAI
from result import Err, Ok, Result

from lumina.core import events
from lumina.core.events import EventBus
from lumina.core.stream import normalize_fragment
from lumina.core.tasks import TaskTracker
from lumina.models.settings import Settings

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENAI_BASE_URL = "https://api.openai.com/v1"

BASE_URLS: dict[str, str] = {
    "openrouter": OPENROUTER_BASE_URL,
    "openai": OPENAI_BASE_URL,
}

SYSTEM_PROMPT = """\
You are Lumina, an intelligent desktop search assistant integrated into the user's desktop.

Your role is to:
- Help users find information, answer questions, and assist with various tasks
- Provide practical, actionable advice when users ask for help
- Answer questions about technology, programming, general knowledge, and daily tasks
- Keep responses concise but comprehensive when needed
- Use proper markdown formatting for better readability (headings, lists, code blocks, etc.)
- Focus on being helpful and accurate

The user is searching from their desktop launcher, so they may ask about:
- How to use applications or system features
- Technical questions about programming, computers, or software
- General knowledge questions
- Task-specific help and tutorials
- File management and system administration

Format your responses with markdown when appropriate. Be helpful, accurate, and concise."""

ClientFactory = Callable[[str, str], AsyncOpenAI]


def default_client_factory(api_key: str, base_url: str) -> AsyncOpenAI:
    headers = {"X-Title": "Lumina"} if base_url == OPENROUTER_BASE_URL else None
    return AsyncOpenAI(api_key=api_key, base_url=base_url, default_headers=headers)


class AiService:
    """Starts answer streams and publishes their fragments on the event bus.

    Only one stream runs at a time; starting a new one cancels the previous
    stream so its late fragments never interleave with the new answer.
    """

    def __init__(
        self,
        bus: EventBus,
        settings: Callable[[], Settings],
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        self._bus = bus
        self._settings = settings
        self._client_factory = client_factory
        self._tasks = TaskTracker()
        self._current: asyncio.Task[None] | None = None

    def start(self, prompt: str) -> Result[None, str]:
        """Validate settings and launch the stream in the background."""
        settings = self._settings()
        base_url = BASE_URLS.get(settings.ai_service)
        if base_url is None:
            return Err("Unsupported AI service")
        api_key = settings.api_key()
        if not api_key:
            return Err("API key not configured")
        try:
            client = self._client_factory(api_key, base_url)
        except Exception as exc:
            return Err(f"Could not create AI client: {exc}")

        self.cancel()
        self._current = self._tasks.spawn(
            self._stream(client, settings.default_model, prompt)
        )
        return Ok(None)

    def cancel(self) -> None:
        if self._current is not None and not self._current.done():
            self._current.cancel()
        self._current = None

    def close(self) -> None:
        self._current = None
        self._tasks.cancel_all()

    async def _stream(self, client: AsyncOpenAI, model: str, prompt: str) -> None:
        try:
            stream = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if not content:
                    continue
                cleaned = normalize_fragment(content)
                if cleaned:
                    self._bus.emit(events.AI_RESPONSE_CHUNK, cleaned)
        except asyncio.CancelledError:
            logger.debug("AI stream superseded")
            raise
        except Exception as exc:
            logger.exception("AI stream failed")
            self._bus.emit(events.AI_RESPONSE_CHUNK, f"\n\n⚠️ AI response failed: {exc}")
        self._bus.emit(events.AI_RESPONSE_COMPLETE)
