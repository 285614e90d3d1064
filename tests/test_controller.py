"""End-to-end tests for the query session controller against a fake backend."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from result import Err, Ok

from conftest import FakeBackend, make_result, settle
from lumina.config import Config
from lumina.core import events
from lumina.core.controller import QuerySessionController
from lumina.core.events import EventBus
from lumina.core.navigation import Key, KeyEvent
from lumina.core.state import Error, Idle, Loading, Results, Streaming
from lumina.models.search import ActionType
from lumina.models.settings import Settings

DEBOUNCE_WAIT = 0.06


async def _type(controller: QuerySessionController, *texts: str) -> None:
    for text in texts:
        controller.set_query(text)
        await asyncio.sleep(0.005)


# ── Debounce and tokens ──


@pytest.mark.asyncio
async def test_rapid_typing_issues_one_search_with_final_query(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    await _type(controller, "c", "ca", "cal")
    assert backend.search_calls == []
    await settle(DEBOUNCE_WAIT)
    assert backend.search_calls == ["cal"]


@pytest.mark.asyncio
async def test_newer_reply_wins_when_older_lands_last(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.gates["first"] = asyncio.Event()
    backend.search_replies["first"] = Ok([make_result("old")])
    backend.search_replies["second"] = Ok([make_result("new")])

    controller.set_query("first")
    await settle(DEBOUNCE_WAIT)
    controller.set_query("second")
    await settle(DEBOUNCE_WAIT)
    backend.gates["first"].set()
    await settle()

    state = controller.state
    assert isinstance(state, Results)
    assert [r.id for r in state.results] == ["new"]


@pytest.mark.asyncio
async def test_older_reply_landing_first_is_dropped(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.gates["first"] = asyncio.Event()
    backend.gates["second"] = asyncio.Event()
    backend.search_replies["first"] = Ok([make_result("old")])
    backend.search_replies["second"] = Ok([make_result("new")])

    controller.set_query("first")
    await settle(DEBOUNCE_WAIT)
    controller.set_query("second")
    await settle(DEBOUNCE_WAIT)

    backend.gates["first"].set()
    await settle()
    assert isinstance(controller.state, Loading)

    backend.gates["second"].set()
    await settle()
    assert [r.id for r in controller.state.results] == ["new"]  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_clearing_query_drops_in_flight_reply(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.gates["late"] = asyncio.Event()
    backend.search_replies["late"] = Ok([make_result()])

    controller.set_query("late")
    await settle(DEBOUNCE_WAIT)
    controller.set_query("")
    assert controller.state == Idle()

    backend.gates["late"].set()
    await settle()
    assert controller.state == Idle()


@pytest.mark.asyncio
async def test_search_failure_shows_empty_results(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.search_replies["boom"] = Err("Search failed: disk")
    controller.set_query("boom")
    await settle(DEBOUNCE_WAIT)
    assert controller.state == Results(())


@pytest.mark.asyncio
async def test_minimum_loading_time_is_honored(
    backend: FakeBackend, bus: EventBus, tmp_path: Path
) -> None:
    config = Config(config_dir=tmp_path, debounce_ms=10, min_loading_ms=200)
    controller = QuerySessionController(backend, bus, config)
    await controller.start()
    backend.search_replies["x"] = Ok([make_result()])

    controller.set_query("x")
    await asyncio.sleep(0.03)
    assert isinstance(controller.state, Loading)
    await asyncio.sleep(0.1)
    assert isinstance(controller.state, Loading)
    await asyncio.sleep(0.2)
    assert isinstance(controller.state, Results)
    controller.stop()


@pytest.mark.asyncio
async def test_slow_search_is_not_padded(
    backend: FakeBackend, bus: EventBus, tmp_path: Path
) -> None:
    now = {"t": 0.0}
    config = Config(config_dir=tmp_path, debounce_ms=10, min_loading_ms=200)
    controller = QuerySessionController(backend, bus, config, clock=lambda: now["t"])
    await controller.start()
    backend.gates["slow"] = asyncio.Event()

    controller.set_query("slow")
    await settle(0.03)
    now["t"] = 0.5  # the reply took longer than the minimum
    backend.gates["slow"].set()
    await settle()
    assert controller.state == Results(())
    controller.stop()


@pytest.mark.asyncio
async def test_sigil_query_never_searches(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    controller.set_query("/what is rust")
    await settle(DEBOUNCE_WAIT)
    assert backend.search_calls == []


# ── Commit and actions ──


@pytest.mark.asyncio
async def test_enter_opens_selected_app_and_resets(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    calculator = make_result("1", "Calculator", ActionType.OPEN_APP, "calc.desktop", 0.9)
    backend.search_replies["cal"] = Ok([calculator])
    controller.set_query("cal")
    await settle(DEBOUNCE_WAIT)
    assert controller.state == Results((calculator,), 0)

    assert controller.handle_key(KeyEvent(Key.ENTER))
    await settle()

    assert backend.opened == ["calc.desktop"]
    assert controller.state == Idle()
    assert controller.query == ""


@pytest.mark.asyncio
async def test_arrow_navigation_then_commit(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    first = make_result("1", action_data="/a")
    second = make_result("2", action_type=ActionType.COPY_TO_CLIPBOARD, action_data="42")
    backend.search_replies["q"] = Ok([first, second])
    controller.set_query("q")
    await settle(DEBOUNCE_WAIT)

    for _ in range(3):
        assert controller.handle_key(KeyEvent(Key.DOWN))
    assert controller.state.selected_index == 1  # type: ignore[union-attr]
    controller.handle_key(KeyEvent(Key.ENTER))
    await settle()
    assert backend.copied == ["42"]
    assert backend.opened == []


@pytest.mark.asyncio
async def test_failed_open_keeps_results(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.open_reply = Err("no such file")
    backend.search_replies["q"] = Ok([make_result()])
    controller.set_query("q")
    await settle(DEBOUNCE_WAIT)
    before = controller.state

    controller.handle_key(KeyEvent(Key.ENTER))
    await settle()
    assert controller.state == before
    assert controller.query == "q"


@pytest.mark.asyncio
async def test_activate_selects_clicked_row(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.search_replies["q"] = Ok(
        [make_result("1", action_data="/a"), make_result("2", action_data="/b")]
    )
    controller.set_query("q")
    await settle(DEBOUNCE_WAIT)

    task = controller.activate(1)
    assert task is not None
    assert await task
    assert backend.opened == ["/b"]


@pytest.mark.asyncio
async def test_keys_outside_results_are_not_consumed(controller: QuerySessionController) -> None:
    assert not controller.handle_key(KeyEvent(Key.DOWN))
    assert not controller.handle_key(KeyEvent(Key.ENTER))
    assert not controller.handle_key(KeyEvent(Key.OTHER))


@pytest.mark.asyncio
async def test_switching_to_sigil_query_leaves_loading(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.gates["cal"] = asyncio.Event()
    backend.search_replies["cal"] = Ok([make_result()])
    controller.set_query("cal")
    await settle(DEBOUNCE_WAIT)
    assert isinstance(controller.state, Loading)

    controller.set_query("/cal")
    backend.gates["cal"].set()
    await settle(DEBOUNCE_WAIT)
    assert controller.state == Idle()
    assert controller.query == "/cal"
    assert backend.search_calls == ["cal"]


# ── AI streaming ──


@pytest.mark.asyncio
async def test_ai_submission_streams_and_new_query_returns_to_idle(
    controller: QuerySessionController, backend: FakeBackend, bus: EventBus
) -> None:
    controller.set_query("/What is 2+2")
    assert controller.handle_key(KeyEvent(Key.ENTER))
    assert controller.state == Streaming("", False)
    assert controller.query == ""
    await settle()
    assert backend.prompts == ["What is 2+2"]

    bus.emit(events.AI_RESPONSE_CHUNK, "4")
    bus.emit(events.AI_RESPONSE_CHUNK, "4")
    assert controller.state == Streaming("4", False)

    bus.emit(events.AI_RESPONSE_COMPLETE)
    assert controller.state == Streaming("4", True)

    controller.new_query()
    assert controller.state == Idle()
    assert controller.machine.buffer.transcript == ""


@pytest.mark.asyncio
async def test_events_from_a_previous_stream_do_not_reach_a_new_answer(
    controller: QuerySessionController, backend: FakeBackend, bus: EventBus
) -> None:
    controller.submit_ai("/first")
    await settle()
    bus.emit(events.AI_RESPONSE_CHUNK, "old")

    controller.submit_ai("/second")
    bus.emit(events.AI_RESPONSE_CHUNK, " tail of old")
    bus.emit(events.AI_RESPONSE_COMPLETE)
    assert controller.state == Streaming("", False)

    await settle()
    assert backend.prompts == ["first", "second"]
    bus.emit(events.AI_RESPONSE_CHUNK, "new")
    bus.emit(events.AI_RESPONSE_COMPLETE)
    assert controller.state == Streaming("new", True)


@pytest.mark.asyncio
async def test_ai_result_from_list_starts_stream(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    ask = make_result("ai_response", "Ask AI: why", ActionType.AI_RESPONSE, "why", 0.7)
    backend.search_replies["why"] = Ok([ask])
    controller.set_query("why")
    await settle(DEBOUNCE_WAIT)

    controller.handle_key(KeyEvent(Key.ENTER))
    await settle()
    assert backend.prompts == ["why"]
    assert backend.opened == []
    assert controller.state == Streaming("", False)


@pytest.mark.asyncio
async def test_ai_start_failure_is_shown_inline(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    backend.ai_reply = Err("API key not configured")
    controller.set_query("/hello")
    controller.handle_key(KeyEvent(Key.ENTER))
    await settle()
    state = controller.state
    assert isinstance(state, Streaming)
    assert state.is_complete
    assert "API key not configured" in state.transcript


@pytest.mark.asyncio
async def test_bare_sigil_does_not_submit(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    assert controller.submit_ai("/   ") is None
    await settle()
    assert backend.prompts == []
    assert controller.state == Idle()


@pytest.mark.asyncio
async def test_fragments_outside_a_stream_are_dropped(
    controller: QuerySessionController, bus: EventBus
) -> None:
    bus.emit(events.AI_RESPONSE_CHUNK, "stray")
    bus.emit(events.AI_RESPONSE_COMPLETE)
    assert controller.state == Idle()
    assert controller.machine.buffer.transcript == ""


@pytest.mark.asyncio
async def test_clearing_query_keeps_answer_but_typing_starts_search(
    controller: QuerySessionController, backend: FakeBackend, bus: EventBus
) -> None:
    controller.submit_ai("/q")
    await settle()
    bus.emit(events.AI_RESPONSE_CHUNK, "answer")
    bus.emit(events.AI_RESPONSE_COMPLETE)

    controller.set_query("x")
    controller.set_query("")
    assert controller.state == Streaming("answer", True)

    controller.set_query("files")
    await settle(DEBOUNCE_WAIT)
    assert backend.search_calls == ["files"]
    assert isinstance(controller.state, Results)
    assert controller.machine.buffer.transcript == ""


@pytest.mark.asyncio
async def test_copy_transcript_only_after_completion(
    controller: QuerySessionController, backend: FakeBackend, bus: EventBus
) -> None:
    controller.submit_ai("/q")
    await settle()
    bus.emit(events.AI_RESPONSE_CHUNK, "line\n\n\n\nnext")
    assert controller.copy_transcript() is None

    bus.emit(events.AI_RESPONSE_COMPLETE)
    task = controller.copy_transcript()
    assert task is not None
    await task
    assert backend.copied == ["line\n\nnext"]


# ── Escape ──


@pytest.mark.asyncio
@pytest.mark.parametrize("scenario", ["loading", "results", "streaming", "error"])
async def test_escape_resets_from_any_state(
    controller: QuerySessionController, backend: FakeBackend, bus: EventBus, scenario: str
) -> None:
    match scenario:
        case "loading":
            backend.gates["q"] = asyncio.Event()
            controller.set_query("q")
            await settle(DEBOUNCE_WAIT)
            assert isinstance(controller.state, Loading)
        case "results":
            backend.search_replies["q"] = Ok([make_result()])
            controller.set_query("q")
            await settle(DEBOUNCE_WAIT)
        case "streaming":
            controller.submit_ai("/q")
            await settle()
            bus.emit(events.AI_RESPONSE_CHUNK, "partial")
            assert controller.state == Streaming("partial", False)
        case "error":
            controller.set_query("q")
            controller.report_error("Startup failed")
            assert controller.state == Error("Startup failed")

    assert not controller.handle_key(KeyEvent(Key.ESCAPE))
    assert controller.state == Idle()
    assert controller.query == ""
    assert controller.machine.buffer.transcript == ""

    if scenario == "loading":
        backend.gates["q"].set()
        await settle()
        assert controller.state == Idle()


@pytest.mark.asyncio
async def test_escape_cancels_pending_debounce(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    controller.set_query("abc")
    controller.escape()
    await settle(DEBOUNCE_WAIT)
    assert backend.search_calls == []


# ── Settings mode ──


@pytest.mark.asyncio
async def test_settings_shortcut_toggles_orthogonal_mode(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    toggled: list[bool] = []
    controller.on_settings_toggled(toggled.append)
    backend.search_replies["q"] = Ok([make_result("1"), make_result("2")])
    controller.set_query("q")
    await settle(DEBOUNCE_WAIT)

    assert controller.handle_key(KeyEvent(Key.COMMA, ctrl=True))
    assert controller.settings_open
    assert not controller.handle_key(KeyEvent(Key.DOWN))
    assert not controller.handle_key(KeyEvent(Key.ENTER))
    assert controller.activate(1) is None
    assert controller.state.selected_index == 0  # type: ignore[union-attr]

    controller.handle_key(KeyEvent(Key.ESCAPE))
    assert not controller.settings_open
    assert toggled == [True, False]
    assert controller.state == Idle()
    assert controller.query == ""
    assert controller.machine.buffer.transcript == ""


@pytest.mark.asyncio
async def test_save_settings(controller: QuerySessionController, backend: FakeBackend) -> None:
    updated = Settings(ai_service="openai", openai_api_key="sk-test")
    controller.open_settings()
    assert await controller.save_settings(updated)
    assert backend.saved == [updated]
    assert controller.settings == updated
    assert not controller.settings_open

    backend.save_reply = Err("read-only")
    controller.open_settings()
    assert not await controller.save_settings(Settings())
    assert controller.settings == updated
    assert controller.settings_open


# ── Lifecycle ──


@pytest.mark.asyncio
async def test_start_loads_settings(
    backend: FakeBackend, bus: EventBus, fast_config: Config
) -> None:
    backend.config_reply = Ok(Settings(default_model="openai/gpt-4o"))
    controller = QuerySessionController(backend, bus, fast_config)
    await controller.start()
    assert controller.started
    assert controller.settings is not None
    assert controller.settings.default_model == "openai/gpt-4o"
    controller.stop()


@pytest.mark.asyncio
async def test_start_survives_config_failure(
    backend: FakeBackend, bus: EventBus, fast_config: Config
) -> None:
    backend.config_reply = Err("corrupt")
    controller = QuerySessionController(backend, bus, fast_config)
    await controller.start()
    assert controller.settings is None
    assert controller.state == Idle()
    controller.stop()


@pytest.mark.asyncio
async def test_stop_releases_subscriptions(
    backend: FakeBackend, bus: EventBus, fast_config: Config
) -> None:
    controller = QuerySessionController(backend, bus, fast_config)
    await controller.start()
    await controller.start()
    names = (events.AI_RESPONSE_CHUNK, events.AI_RESPONSE_COMPLETE, events.TOGGLE_WINDOW_EVENT)
    assert all(bus.subscriber_count(name) == 1 for name in names)

    controller.submit_ai("/q")
    controller.stop()
    assert all(bus.subscriber_count(name) == 0 for name in names)
    assert not controller.started

    bus.emit(events.AI_RESPONSE_CHUNK, "late")
    assert controller.machine.buffer.transcript == ""


@pytest.mark.asyncio
async def test_stop_cancels_in_flight_search(
    backend: FakeBackend, bus: EventBus, fast_config: Config
) -> None:
    backend.gates["q"] = asyncio.Event()
    controller = QuerySessionController(backend, bus, fast_config)
    await controller.start()
    controller.set_query("q")
    await settle(DEBOUNCE_WAIT)
    assert controller.pending_tasks == 1

    controller.stop()
    await settle()
    assert controller.pending_tasks == 0


@pytest.mark.asyncio
async def test_toggle_event_reaches_host(
    controller: QuerySessionController, bus: EventBus
) -> None:
    calls: list[str] = []
    bus.emit(events.TOGGLE_WINDOW_EVENT)
    controller.on_toggle_window = lambda: calls.append("toggle")
    bus.emit(events.TOGGLE_WINDOW_EVENT)
    assert calls == ["toggle"]


@pytest.mark.asyncio
async def test_query_listeners_follow_resets(
    controller: QuerySessionController, backend: FakeBackend
) -> None:
    seen: list[str] = []
    controller.on_query_changed(seen.append)
    controller.set_query("abc")
    controller.set_query("abc")
    controller.escape()
    assert seen == ["abc", ""]
