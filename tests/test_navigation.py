"""Tests for key routing and clamped navigation."""

from __future__ import annotations

import pytest

from conftest import make_result
from lumina.core.navigation import (
    Command,
    Key,
    KeyEvent,
    KeyRouter,
    NavigationController,
    RoutedKey,
)
from lumina.core.state import Idle, Loading, Results, SessionStateMachine, Streaming

RESULTS = Results((make_result("1"), make_result("2")))


def test_escape_is_always_live() -> None:
    router = KeyRouter()
    for state in (Idle(), Loading(1), RESULTS, Streaming("x", True)):
        routed = router.route(KeyEvent(Key.ESCAPE), state, "q")
        assert routed == RoutedKey(Command.RESET, prevent_default=False)
    assert router.route(KeyEvent(Key.ESCAPE), Idle(), "", settings_open=True) is not None


def test_arrows_and_enter_only_act_on_results() -> None:
    router = KeyRouter()
    assert router.route(KeyEvent(Key.DOWN), RESULTS, "q") == RoutedKey(Command.MOVE_DOWN)
    assert router.route(KeyEvent(Key.UP), RESULTS, "q") == RoutedKey(Command.MOVE_UP)
    assert router.route(KeyEvent(Key.ENTER), RESULTS, "q") == RoutedKey(Command.COMMIT)

    for state in (Idle(), Loading(3), Streaming("", False)):
        assert router.route(KeyEvent(Key.DOWN), state, "q") is None
        assert router.route(KeyEvent(Key.ENTER), state, "q") is None


def test_enter_with_sigil_submits_ai_in_any_state() -> None:
    router = KeyRouter("/")
    for state in (Idle(), RESULTS, Streaming("old", True)):
        routed = router.route(KeyEvent(Key.ENTER), state, "/What is 2+2")
        assert routed == RoutedKey(Command.SUBMIT_AI)


def test_custom_sigil() -> None:
    router = KeyRouter("?")
    assert router.is_ai_query("?why")
    assert not router.is_ai_query("/why")


@pytest.mark.parametrize("modifier", [{"ctrl": True}, {"meta": True}])
def test_modifier_comma_opens_settings(modifier: dict[str, bool]) -> None:
    router = KeyRouter()
    event = KeyEvent(Key.COMMA, **modifier)
    assert event.is_settings_shortcut
    assert router.route(event, Idle(), "") == RoutedKey(Command.OPEN_SETTINGS)
    assert router.route(KeyEvent(Key.COMMA), Idle(), "") is None


def test_settings_mode_receives_no_navigation() -> None:
    router = KeyRouter()
    for key in (Key.DOWN, Key.UP, Key.ENTER):
        assert router.route(KeyEvent(key), RESULTS, "/q", settings_open=True) is None
    assert router.route(KeyEvent(Key.COMMA, ctrl=True), RESULTS, "", settings_open=True) is None


def test_other_keys_are_not_routed() -> None:
    assert KeyRouter().route(KeyEvent(Key.OTHER), RESULTS, "q") is None


def test_navigation_never_leaves_bounds() -> None:
    machine = SessionStateMachine()
    token = machine.begin_search()
    results = [make_result(str(i)) for i in range(3)]
    machine.apply_search_reply(token, results)
    navigation = NavigationController(machine)

    for _ in range(10):
        navigation.move_down()
        state = machine.state
        assert isinstance(state, Results)
        assert 0 <= state.selected_index < 3
    assert navigation.selected() == results[2]

    for _ in range(10):
        navigation.move_up()
        assert 0 <= machine.state.selected_index < 3  # type: ignore[union-attr]
    assert navigation.selected() == results[0]


def test_navigation_without_results() -> None:
    machine = SessionStateMachine()
    navigation = NavigationController(machine)
    assert not navigation.move_down()
    assert navigation.selected() is None
