"""Normalized key input and the actions the editor recognizes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


def _normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    values = tuple(m.strip().lower() for m in modifiers if m.strip())
    return tuple(sorted(dict.fromkeys(values)))


class KeyAction(str, Enum):
    TAB = "tab"
    ENTER = "enter"
    BACKSPACE = "backspace"
    OPEN_PAREN = "open_paren"
    OPEN_CURLY = "open_curly"
    UNDO = "undo"
    REDO = "redo"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    INSERT = "insert"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class KeyInput:
    """Single key press as reported by a host widget."""

    key: str
    modifiers: tuple[str, ...] = ()
    text: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "modifiers", _normalize_modifiers(self.modifiers))

    @property
    def ctrl(self) -> bool:
        return "ctrl" in self.modifiers

    @property
    def token(self) -> str:
        if self.modifiers:
            return "+".join(self.modifiers) + "+" + self.key.lower()
        return self.key.lower()


__all__ = ["KeyAction", "KeyInput"]
