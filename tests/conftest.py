"""Shared fixtures for Lumina tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from result import Ok, Result

from lumina.config import Config
from lumina.core.controller import QuerySessionController
from lumina.core.events import EventBus
from lumina.models.search import ActionType, SearchResult
from lumina.models.settings import Settings


def make_result(
    result_id: str = "1",
    title: str = "Calculator",
    action_type: ActionType = ActionType.OPEN_APP,
    action_data: str = "/usr/share/applications/calculator.desktop",
    score: float = 0.9,
) -> SearchResult:
    return SearchResult(
        id=result_id,
        title=title,
        action_type=action_type,
        action_data=action_data,
        score=score,
    )


class FakeBackend:
    """In-memory backend that records every call.

    Search replies come from ``search_replies`` (default: no results). A
    query listed in ``gates`` blocks until its event is set, which lets a
    test decide the order in which overlapping replies land.
    """

    def __init__(self) -> None:
        self.search_replies: dict[str, Result[list[SearchResult], str]] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.search_calls: list[str] = []
        self.opened: list[str] = []
        self.copied: list[str] = []
        self.prompts: list[str] = []
        self.executed: list[SearchResult] = []
        self.saved: list[Settings] = []
        self.open_reply: Result[None, str] = Ok(None)
        self.copy_reply: Result[None, str] = Ok(None)
        self.ai_reply: Result[None, str] = Ok(None)
        self.config_reply: Result[Settings, str] = Ok(Settings())
        self.save_reply: Result[None, str] = Ok(None)

    async def search(self, query: str) -> Result[list[SearchResult], str]:
        self.search_calls.append(query)
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()
        return self.search_replies.get(query, Ok([]))

    async def execute_action(self, result: SearchResult) -> Result[str, str]:
        self.executed.append(result)
        return Ok("ok")

    async def ai_request(self, prompt: str) -> Result[None, str]:
        self.prompts.append(prompt)
        return self.ai_reply

    async def open_path(self, path: str) -> Result[None, str]:
        self.opened.append(path)
        return self.open_reply

    async def copy_to_clipboard(self, text: str) -> Result[None, str]:
        self.copied.append(text)
        return self.copy_reply

    async def get_config(self) -> Result[Settings, str]:
        return self.config_reply

    async def save_config(self, settings: Settings) -> Result[None, str]:
        self.saved.append(settings)
        return self.save_reply


async def settle(seconds: float = 0.0) -> None:
    """Let pending callbacks and tasks run."""
    await asyncio.sleep(seconds)
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def fast_config(tmp_path: Path) -> Config:
    """Config with short timers so tests stay quick."""
    return Config(config_dir=tmp_path / "lumina", debounce_ms=20, min_loading_ms=0)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def controller(backend: FakeBackend, bus: EventBus, fast_config: Config):
    ctrl = QuerySessionController(backend, bus, fast_config)
    await ctrl.start()
    yield ctrl
    ctrl.stop()
