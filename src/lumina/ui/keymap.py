"""Translate Qt key presses into toolkit-independent key events."""

from __future__ import annotations

from PySide6.QtCore import Qt

from lumina.core.navigation import Key, KeyEvent

_KEYS: dict[int, Key] = {
    int(Qt.Key.Key_Escape.value): Key.ESCAPE,
    int(Qt.Key.Key_Up.value): Key.UP,
    int(Qt.Key.Key_Down.value): Key.DOWN,
    int(Qt.Key.Key_Return.value): Key.ENTER,
    int(Qt.Key.Key_Enter.value): Key.ENTER,
    int(Qt.Key.Key_Comma.value): Key.COMMA,
}


def key_event_from_qt(key: int, modifiers: Qt.KeyboardModifier) -> KeyEvent:
    """Build a :class:`KeyEvent` from a Qt key code and modifier flags.

    On macOS Qt reports Command as ``ControlModifier`` and Control as
    ``MetaModifier``; both count as the settings modifier.
    """
    return KeyEvent(
        key=_KEYS.get(int(key), Key.OTHER),
        ctrl=bool(modifiers & Qt.KeyboardModifier.ControlModifier),
        meta=bool(modifiers & Qt.KeyboardModifier.MetaModifier),
    )
