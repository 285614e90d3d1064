"""Keyboard routing and result-list navigation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from lumina.core.state import Results, SessionState, SessionStateMachine
from lumina.models.search import SearchResult


class Key(Enum):
    ESCAPE = auto()
    UP = auto()
    DOWN = auto()
    ENTER = auto()
    COMMA = auto()
    OTHER = auto()


@dataclass(frozen=True)
class KeyEvent:
    """A discrete key press, independent of any UI toolkit."""

    key: Key
    ctrl: bool = False
    meta: bool = False

    @property
    def is_settings_shortcut(self) -> bool:
        return self.key is Key.COMMA and (self.ctrl or self.meta)


class Command(Enum):
    RESET = auto()
    MOVE_UP = auto()
    MOVE_DOWN = auto()
    COMMIT = auto()
    SUBMIT_AI = auto()
    OPEN_SETTINGS = auto()


@dataclass(frozen=True)
class RoutedKey:
    command: Command
    prevent_default: bool = True


class KeyRouter:
    """Maps key events to controller commands for the current state.

    Escape and AI submission are always live. Arrow keys and Enter only act
    on a ``Results`` state, and nothing but Escape reaches the session while
    the settings view is open.
    """

    def __init__(self, sigil: str = "/") -> None:
        self._sigil = sigil

    def is_ai_query(self, query: str) -> bool:
        return query.startswith(self._sigil)

    def route(
        self,
        event: KeyEvent,
        state: SessionState,
        query: str,
        *,
        settings_open: bool = False,
    ) -> RoutedKey | None:
        if event.key is Key.ESCAPE:
            return RoutedKey(Command.RESET, prevent_default=False)
        if settings_open:
            return None
        if event.is_settings_shortcut:
            return RoutedKey(Command.OPEN_SETTINGS)
        if event.key is Key.ENTER and self.is_ai_query(query):
            return RoutedKey(Command.SUBMIT_AI)
        if not isinstance(state, Results):
            return None
        if event.key is Key.DOWN:
            return RoutedKey(Command.MOVE_DOWN)
        if event.key is Key.UP:
            return RoutedKey(Command.MOVE_UP)
        if event.key is Key.ENTER:
            return RoutedKey(Command.COMMIT)
        return None


class NavigationController:
    """Clamped (never wrapping) movement within the current result list."""

    def __init__(self, machine: SessionStateMachine) -> None:
        self._machine = machine

    def move_down(self) -> bool:
        return self._machine.move_selection(1)

    def move_up(self) -> bool:
        return self._machine.move_selection(-1)

    def selected(self) -> SearchResult | None:
        state = self._machine.state
        if isinstance(state, Results):
            return state.selected
        return None
