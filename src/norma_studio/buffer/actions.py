"""Reversible edit actions and the bounded log that stores them."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from .validation import BufferValidationError


@dataclass(frozen=True, slots=True)
class EditAction:
    """Replace ``old_text`` found at ``start`` with ``new_text``.

    Applying the action and then its ``inverse()`` at the same offset restores
    the original text.
    """

    start: int
    old_text: str = ""
    new_text: str = ""

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("start cannot be negative")

    @classmethod
    def between(cls, before: str, after: str) -> Optional["EditAction"]:
        """Return the smallest action turning ``before`` into ``after``.

        The common prefix is taken first, then the longest common suffix of
        what remains, so the two never overlap. Equal texts give ``None``.
        """

        if before == after:
            return None
        limit = min(len(before), len(after))
        prefix = 0
        while prefix < limit and before[prefix] == after[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < limit - prefix
            and before[len(before) - 1 - suffix] == after[len(after) - 1 - suffix]
        ):
            suffix += 1
        return cls(
            start=prefix,
            old_text=before[prefix : len(before) - suffix],
            new_text=after[prefix : len(after) - suffix],
        )

    def inverse(self) -> "EditAction":
        return EditAction(self.start, self.new_text, self.old_text)

    def matches(self, text: str) -> bool:
        end = self.start + len(self.old_text)
        return end <= len(text) and text[self.start : end] == self.old_text

    def apply(self, text: str) -> str:
        if not self.matches(text):
            raise BufferValidationError(
                "Edit does not match buffer contents", offset=self.start
            )
        end = self.start + len(self.old_text)
        return text[: self.start] + self.new_text + text[end:]

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "oldText": self.old_text, "newText": self.new_text}


@dataclass(slots=True)
class HistoryLog:
    """Entries before ``cursor`` can be undone, entries from it redone."""

    cursor: int = 0
    entries: List[EditAction] = field(default_factory=list)

    def append(self, action: EditAction, *, limit: int) -> int:
        """Drop the redo tail, evict to fit ``limit`` and append.

        Returns the number of evicted entries.
        """

        del self.entries[self.cursor :]
        evicted = max(0, len(self.entries) + 1 - limit)
        if evicted:
            del self.entries[:evicted]
            self.cursor = max(0, self.cursor - evicted)
        self.entries.append(action)
        self.cursor += 1
        return evicted

    def to_json(self) -> str:
        return json.dumps(
            {
                "cursor": self.cursor,
                "entries": [entry.to_dict() for entry in self.entries],
            }
        )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_log(raw: object) -> bool:
    """Check the decoded JSON shape of a persisted log."""

    if not isinstance(raw, Mapping):
        return False
    entries = raw.get("entries")
    cursor = raw.get("cursor")
    if not isinstance(entries, list) or not _is_int(cursor):
        return False
    if not 0 <= cursor <= len(entries):
        return False
    for entry in entries:
        if not isinstance(entry, Mapping):
            return False
        start = entry.get("start")
        if not _is_int(start) or start < 0:
            return False
        if not isinstance(entry.get("oldText"), str):
            return False
        if not isinstance(entry.get("newText"), str):
            return False
    return True


def parse_log(payload: Optional[str]) -> Optional[HistoryLog]:
    """Decode a persisted log; ``None`` means missing, unparsable or invalid."""

    if payload is None:
        return None
    try:
        raw = json.loads(payload)
    except (TypeError, ValueError):
        return None
    if not validate_log(raw):
        return None
    return HistoryLog(
        cursor=raw["cursor"],
        entries=[
            EditAction(entry["start"], entry["oldText"], entry["newText"])
            for entry in raw["entries"]
        ],
    )


__all__ = ["EditAction", "HistoryLog", "validate_log", "parse_log"]
