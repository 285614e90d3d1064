"""Protocol definitions for the collaborators the controller talks to."""

from __future__ import annotations

from typing import Protocol

from result import Result

from lumina.models.search import SearchResult
from lumina.models.settings import Settings


class Backend(Protocol):
    """Request/reply calls used by the query session controller."""

    async def search(self, query: str) -> Result[list[SearchResult], str]: ...

    async def execute_action(self, result: SearchResult) -> Result[str, str]:
        """Run a result's action in one call (host and CLI entry point).

        The session dispatcher uses the finer-grained effects below instead.
        """
        ...

    async def ai_request(self, prompt: str) -> Result[None, str]: ...

    async def open_path(self, path: str) -> Result[None, str]: ...

    async def copy_to_clipboard(self, text: str) -> Result[None, str]: ...

    async def get_config(self) -> Result[Settings, str]: ...

    async def save_config(self, settings: Settings) -> Result[None, str]: ...
