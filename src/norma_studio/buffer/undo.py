"""Persistent undo/redo history for a ``TextBuffer``."""

from __future__ import annotations

from typing import Callable, Optional

from norma_studio.runtime import telemetry

from .actions import EditAction, HistoryLog, parse_log
from .buffer import TextBuffer
from .storage import Storage
from .validation import BufferValidationError

DEFAULT_HISTORY_KEY = "norma_studio.userCodeHist"
DEFAULT_LIMIT = 500


def _noop() -> None:
    return None


class EditHistory:
    """Records reversible actions against a buffer and replays them.

    The log is written to ``storage`` after every change. A persisted log
    that is missing, unparsable or structurally invalid is replaced by an
    empty one instead of raising.
    """

    def __init__(
        self,
        buffer: TextBuffer,
        storage: Storage,
        *,
        key: str = DEFAULT_HISTORY_KEY,
        limit: int = DEFAULT_LIMIT,
        on_change: Callable[[], None] = _noop,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.buffer = buffer
        self.storage = storage
        self.key = key
        self.limit = limit
        self.on_change = on_change
        self.log = HistoryLog()

    @property
    def cursor(self) -> int:
        return self.log.cursor

    @property
    def entries(self) -> tuple[EditAction, ...]:
        return tuple(self.log.entries)

    def can_undo(self) -> bool:
        return self.log.cursor > 0

    def can_redo(self) -> bool:
        return self.log.cursor < len(self.log.entries)

    def load(self) -> HistoryLog:
        payload = self.storage.get(self.key)
        loaded = parse_log(payload)
        if loaded is None:
            if payload is not None:
                telemetry.record_event(
                    "history.corrupt",
                    level="warning",
                    data={"key": self.key, "size": len(payload)},
                )
            self.log = HistoryLog()
            self.save()
        else:
            self.log = self._fit(loaded)
        return self.log

    def save(self) -> None:
        self.storage.set(self.key, self.log.to_json())

    def clear(self) -> None:
        self.log = HistoryLog()
        self.save()

    def apply_and_record(self, action: EditAction, *, caret: Optional[int] = None) -> None:
        """Apply ``action`` to the buffer and append it to the log.

        Anything after the cursor is discarded first. The caret ends after the
        inserted text unless ``caret`` says otherwise.
        """

        with telemetry.span(
            "history::apply", component=True, metadata={"buffer": self.buffer.name}
        ):
            self.buffer.apply(action, caret=caret)
            self._record(action)
        self.on_change()

    def record_change(self, before: str, after: str) -> Optional[EditAction]:
        """Log the minimal action for an edit the host already performed."""

        action = EditAction.between(before, after)
        if action is None:
            return None
        self._record(action)
        self.on_change()
        return action

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        entry = self.log.entries[self.log.cursor - 1]
        if not self._replay(entry.inverse(), caret=entry.start + len(entry.old_text)):
            return False
        self.log.cursor -= 1
        self.save()
        self.on_change()
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        entry = self.log.entries[self.log.cursor]
        if not self._replay(entry, caret=entry.start + len(entry.new_text)):
            return False
        self.log.cursor += 1
        self.save()
        self.on_change()
        return True

    def _record(self, action: EditAction) -> None:
        evicted = self.log.append(action, limit=self.limit)
        if evicted:
            telemetry.record_event(
                "history.evicted", level="debug", data={"count": evicted}
            )
        self.save()

    def _replay(self, action: EditAction, *, caret: int) -> bool:
        try:
            self.buffer.apply(action, caret=caret)
        except BufferValidationError as exc:
            # The stored log no longer describes this text.
            telemetry.record_event(
                "history.corrupt",
                level="warning",
                data={"key": self.key, "reason": str(exc)},
            )
            self.clear()
            return False
        return True

    def _fit(self, log: HistoryLog) -> HistoryLog:
        overflow = len(log.entries) - self.limit
        if overflow > 0:
            del log.entries[:overflow]
            log.cursor = max(0, log.cursor - overflow)
        return log


__all__ = ["EditHistory", "DEFAULT_HISTORY_KEY", "DEFAULT_LIMIT"]
