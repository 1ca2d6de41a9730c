"""Maps key input onto ``KeyAction`` values."""

from __future__ import annotations

from typing import Mapping

from .models import KeyAction, KeyInput

DEFAULT_BINDINGS: Mapping[str, KeyAction] = {
    "tab": KeyAction.TAB,
    "enter": KeyAction.ENTER,
    "return": KeyAction.ENTER,
    "backspace": KeyAction.BACKSPACE,
    "(": KeyAction.OPEN_PAREN,
    "left_parenthesis": KeyAction.OPEN_PAREN,
    "{": KeyAction.OPEN_CURLY,
    "left_curly_bracket": KeyAction.OPEN_CURLY,
    "ctrl+z": KeyAction.UNDO,
    "ctrl+y": KeyAction.REDO,
    "ctrl+shift+z": KeyAction.REDO,
    "left": KeyAction.LEFT,
    "right": KeyAction.RIGHT,
    "up": KeyAction.UP,
    "down": KeyAction.DOWN,
    "home": KeyAction.HOME,
    "end": KeyAction.END,
}


class KeyResolver:
    def __init__(self, bindings: Mapping[str, KeyAction] = DEFAULT_BINDINGS) -> None:
        self.bindings = dict(bindings)

    def resolve(self, key: KeyInput) -> KeyAction:
        """Bound action, else ``INSERT`` for printable text, else ``NONE``."""

        action = self.bindings.get(key.token)
        if action is not None:
            return action
        if key.text and key.text.isprintable() and not key.ctrl:
            return KeyAction.INSERT
        return KeyAction.NONE


__all__ = ["KeyResolver", "DEFAULT_BINDINGS"]
