"""Dataclasses describing lexical rules, fragments and render nodes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern

LINKED_CLASS = "selected-bracket"


class BracketDirection(str, Enum):
    OPENING = "opening"
    CLOSING = "closing"


@dataclass(frozen=True, slots=True)
class BracketRole:
    """Marks a rule as one side of a bracket kind named ``pair_name``."""

    pair_name: str
    direction: BracketDirection

    def __post_init__(self) -> None:
        if not self.pair_name:
            raise ValueError("pair_name cannot be empty")
        object.__setattr__(self, "direction", BracketDirection(self.direction))


@dataclass(frozen=True, slots=True)
class LexicalRule:
    """Category tag plus the pattern that recognizes it."""

    class_name: str
    pattern: Pattern[str]
    bracket: Optional[BracketRole] = None

    def __post_init__(self) -> None:
        if not self.class_name:
            raise ValueError("class_name cannot be empty")
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))

    @classmethod
    def build(
        cls,
        class_name: str,
        pattern: str,
        *,
        flags: int = 0,
        bracket: Optional[BracketRole] = None,
    ) -> "LexicalRule":
        return cls(class_name, re.compile(pattern, flags), bracket)

    def test(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True, slots=True)
class Fragment:
    """Contiguous slice of the source; ``rule is None`` means plain text."""

    text: str
    start: int
    rule: Optional[LexicalRule] = None

    @property
    def end(self) -> int:
        return self.start + len(self.text)


@dataclass(frozen=True, slots=True)
class RenderNode:
    text: str
    class_name: Optional[str] = None
    linked: bool = False

    @property
    def styled(self) -> bool:
        return self.class_name is not None

    @property
    def classes(self) -> tuple[str, ...]:
        if self.class_name is None:
            return ()
        if self.linked:
            return (self.class_name, LINKED_CLASS)
        return (self.class_name,)


__all__ = [
    "BracketDirection",
    "BracketRole",
    "Fragment",
    "LexicalRule",
    "RenderNode",
    "LINKED_CLASS",
]
