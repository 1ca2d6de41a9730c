"""Offset checks shared by the buffer and its edit actions."""

from __future__ import annotations


class BufferValidationError(RuntimeError):
    """Raised for out-of-range offsets or edits that do not match the text."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset


def ensure_offset(text: str, offset: int) -> int:
    if offset < 0 or offset > len(text):
        raise BufferValidationError("Offset out of range", offset=offset)
    return offset


def ensure_range(text: str, start: int, end: int) -> tuple[int, int]:
    ensure_offset(text, start)
    ensure_offset(text, end)
    if start > end:
        start, end = end, start
    return start, end


__all__ = ["BufferValidationError", "ensure_offset", "ensure_range"]
