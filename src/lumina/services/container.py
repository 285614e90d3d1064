"""Service container with DI wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from result import Err, Result

from lumina.core.events import EventBus
from lumina.models.search import SearchResult
from lumina.models.settings import Settings
from lumina.services.action_service import ActionService
from lumina.services.ai_service import AiService
from lumina.services.search_service import SearchService
from lumina.services.settings_store import SettingsStore

if TYPE_CHECKING:
    from lumina.config import Config

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Holds all application services. Also the controller's backend."""

    bus: EventBus
    settings_store: SettingsStore
    search_service: SearchService
    ai_service: AiService
    action_service: ActionService

    @classmethod
    async def create(cls, config: Config, bus: EventBus | None = None) -> ServiceContainer:
        """Async factory that wires all dependencies."""
        bus = bus or EventBus()
        store = SettingsStore(config.settings_path)
        loaded = await store.load()
        if isinstance(loaded, Err):
            logger.warning("Using default settings: %s", loaded.err_value)

        ai_service = AiService(bus, store.current)
        return cls(
            bus=bus,
            settings_store=store,
            search_service=SearchService(store.current, config.max_results),
            ai_service=ai_service,
            action_service=ActionService(ai_service),
        )

    @property
    def settings(self) -> Settings:
        return self.settings_store.current()

    # ── Backend protocol ──

    async def search(self, query: str) -> Result[list[SearchResult], str]:
        return await self.search_service.search(query)

    async def execute_action(self, result: SearchResult) -> Result[str, str]:
        return await self.action_service.execute_action(result)

    async def ai_request(self, prompt: str) -> Result[None, str]:
        return await self.action_service.ai_request(prompt)

    async def open_path(self, path: str) -> Result[None, str]:
        return await self.action_service.open_path(path)

    async def copy_to_clipboard(self, text: str) -> Result[None, str]:
        return await self.action_service.copy_to_clipboard(text)

    async def get_config(self) -> Result[Settings, str]:
        return await self.settings_store.load()

    async def save_config(self, settings: Settings) -> Result[None, str]:
        return await self.settings_store.save(settings)

    async def close(self) -> None:
        """Shut down all services."""
        self.ai_service.close()
