"""Text buffer, reversible edit actions and persistent undo/redo history."""

from .actions import EditAction, HistoryLog, parse_log, validate_log
from .buffer import TextBuffer
from .state import BufferState, Selection
from .storage import JsonFileStorage, MemoryStorage, Storage
from .undo import EditHistory
from .validation import BufferValidationError, ensure_offset, ensure_range

__all__ = [
    "BufferState",
    "BufferValidationError",
    "EditAction",
    "EditHistory",
    "HistoryLog",
    "JsonFileStorage",
    "MemoryStorage",
    "Selection",
    "Storage",
    "TextBuffer",
    "ensure_offset",
    "ensure_range",
    "parse_log",
    "validate_log",
]
