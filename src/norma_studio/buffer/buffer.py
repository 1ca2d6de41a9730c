"""Host-owned text buffer: the editable source plus its selection."""

from __future__ import annotations

from typing import Optional

from .actions import EditAction
from .state import BufferState
from .validation import ensure_offset, ensure_range


class TextBuffer:
    def __init__(
        self,
        text: str = "",
        *,
        name: str = "default",
        state: Optional[BufferState] = None,
    ) -> None:
        self.name = name
        self._text = text
        self.version = 0
        self.state = state or BufferState()

    @property
    def text(self) -> str:
        return self._text

    @property
    def caret(self) -> int:
        return self.state.caret

    def set_text(self, text: str, *, caret: Optional[int] = None) -> None:
        """Replace everything without going through history (initial load)."""

        self._text = text
        self.version += 1
        self.state.set_caret(len(text) if caret is None else ensure_offset(text, caret))

    def apply(self, action: EditAction, *, caret: Optional[int] = None) -> None:
        """Apply ``action`` and collapse the selection.

        The caret lands after the inserted text unless ``caret`` is given.
        """

        self._text = action.apply(self._text)
        self.version += 1
        target = action.start + len(action.new_text) if caret is None else caret
        self.state.set_caret(ensure_offset(self._text, target))

    def move_caret(self, offset: int) -> None:
        self.state.set_caret(ensure_offset(self._text, offset))

    def select(self, start: int, end: int) -> None:
        start, end = ensure_range(self._text, start, end)
        self.state.set_selection(start, end)

    def char_before(self, offset: Optional[int] = None) -> str:
        position = self.caret if offset is None else offset
        return self._text[position - 1] if position > 0 else ""

    def char_at(self, offset: Optional[int] = None) -> str:
        position = self.caret if offset is None else offset
        return self._text[position] if position < len(self._text) else ""

    def line_column(self, offset: Optional[int] = None) -> tuple[int, int]:
        """1-based (line, column) of ``offset`` (default: the caret)."""

        position = self.caret if offset is None else ensure_offset(self._text, offset)
        before = self._text[:position]
        line = before.count("\n") + 1
        column = position - (before.rfind("\n") + 1) + 1
        return line, column

    def offset_for(self, line: int, column: int) -> int:
        """Offset of a 1-based position, clamped into the text."""

        lines = self._text.split("\n")
        row = min(max(line, 1), len(lines)) - 1
        col = min(max(column, 1) - 1, len(lines[row]))
        return sum(len(text) + 1 for text in lines[:row]) + col


__all__ = ["TextBuffer"]
