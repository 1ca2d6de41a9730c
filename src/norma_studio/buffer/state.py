"""Caret and selection state for a text buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Selection = Tuple[int, int]  # (start, end) character offsets


@dataclass(slots=True)
class BufferState:
    """Selection held as character offsets; a collapsed selection is the caret."""

    selection_start: int = 0
    selection_end: int = 0

    @property
    def caret(self) -> int:
        return self.selection_start

    @property
    def selection(self) -> Selection:
        return (self.selection_start, self.selection_end)

    @property
    def collapsed(self) -> bool:
        return self.selection_start == self.selection_end

    def set_caret(self, offset: int) -> None:
        self.selection_start = offset
        self.selection_end = offset

    def set_selection(self, start: int, end: int) -> None:
        if start > end:
            start, end = end, start
        self.selection_start = start
        self.selection_end = end
