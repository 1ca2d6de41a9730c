from __future__ import annotations

import json
from typing import List, Optional

from norma_studio.buffer import EditAction, EditHistory, MemoryStorage, TextBuffer

KEY = "test.history"


def make_history(
    text: str = "",
    *,
    stored: Optional[str] = None,
    limit: int = 500,
) -> tuple[EditHistory, MemoryStorage]:
    storage = MemoryStorage({KEY: stored} if stored is not None else None)
    buffer = TextBuffer(text)
    buffer.move_caret(len(text))
    history = EditHistory(buffer, storage, key=KEY, limit=limit)
    history.load()
    return history, storage


def stored_log(storage: MemoryStorage) -> dict:
    payload = storage.get(KEY)
    assert payload is not None
    return json.loads(payload)


def test_insert_then_undo_and_redo() -> None:
    history, _ = make_history("main {}")
    history.buffer.move_caret(6)

    history.apply_and_record(EditAction(6, "", " "))
    assert history.buffer.text == "main { }"
    assert history.buffer.caret == 7

    assert history.undo() is True
    assert history.buffer.text == "main {}"
    assert history.buffer.caret == 6

    assert history.redo() is True
    assert history.buffer.text == "main { }"
    assert history.buffer.caret == 7


def test_undo_then_redo_is_identity_on_text_and_log() -> None:
    history, storage = make_history()
    for index, piece in enumerate(["a", "b", "c"]):
        history.apply_and_record(EditAction(index, "", piece))
    before = (history.buffer.text, stored_log(storage))

    history.undo()
    history.redo()

    assert (history.buffer.text, stored_log(storage)) == before



def test_mixed_edits_undo_back_to_original_text_and_caret() -> None:
    history, _ = make_history("hello world")
    history.buffer.move_caret(3)
    actions = [
        EditAction(3, "", "XY"),
        EditAction(0, "he", ""),
        EditAction(6, "world", "there"),
    ]

    for action in actions:
        history.apply_and_record(action)
    assert history.buffer.text == "lXYlo there"

    for _ in actions:
        assert history.undo() is True

    assert history.buffer.text == "hello world"
    assert history.buffer.caret == 3
    assert history.can_undo() is False


def test_redo_then_undo_mid_history_changes_nothing() -> None:
    history, storage = make_history("hello world")
    history.apply_and_record(EditAction(0, "hello", "howdy"))
    history.apply_and_record(EditAction(5, " ", ""))
    history.apply_and_record(EditAction(10, "", "!"))
    history.undo()
    history.undo()
    before = (history.buffer.text, history.buffer.caret, stored_log(storage))

    assert history.redo() is True
    assert history.undo() is True

    assert (history.buffer.text, history.buffer.caret, stored_log(storage)) == before
    assert history.can_redo() is True

def test_undo_at_start_and_redo_at_end_do_nothing() -> None:
    history, _ = make_history("x")

    assert history.undo() is False
    assert history.redo() is False
    assert history.buffer.text == "x"


def test_new_edit_discards_redo_tail() -> None:
    history, _ = make_history()
    history.apply_and_record(EditAction(0, "", "a"))
    history.apply_and_record(EditAction(1, "", "b"))
    history.undo()

    history.apply_and_record(EditAction(1, "", "c"))

    assert history.buffer.text == "ac"
    assert [entry.new_text for entry in history.entries] == ["a", "c"]
    assert history.can_redo() is False


def test_limit_evicts_oldest_entries() -> None:
    history, storage = make_history(limit=2)
    for index, piece in enumerate("abc"):
        history.apply_and_record(EditAction(index, "", piece))

    payload = stored_log(storage)

    assert payload["cursor"] == 2
    assert [entry["newText"] for entry in payload["entries"]] == ["b", "c"]
    assert history.undo() and history.undo()
    assert history.undo() is False
    assert history.buffer.text == "a"


def test_every_change_is_persisted() -> None:
    history, storage = make_history()

    history.apply_and_record(EditAction(0, "", "main"))
    assert stored_log(storage)["cursor"] == 1

    history.undo()
    assert stored_log(storage)["cursor"] == 0


def test_load_restores_valid_log() -> None:
    stored = json.dumps(
        {"cursor": 1, "entries": [{"start": 0, "oldText": "", "newText": "ab"}]}
    )
    history, _ = make_history("ab", stored=stored)

    assert history.cursor == 1
    assert history.undo() is True
    assert history.buffer.text == ""


def test_corrupt_logs_are_replaced_with_empty_log() -> None:
    broken = [
        "not json at all",
        '{"cursor": "1", "entries": []}',
        '{"cursor": 0, "entries": [{"start": 0, "newText": "a"}]}',
        '{"cursor": 5, "entries": []}',
        '{"cursor": 0, "entries": [{"start": false, "oldText": "", "newText": ""}]}',
    ]
    for payload in broken:
        history, storage = make_history(stored=payload)

        assert history.cursor == 0
        assert history.entries == ()
        assert stored_log(storage) == {"cursor": 0, "entries": []}


def test_stale_entry_resets_the_log() -> None:
    stored = json.dumps(
        {"cursor": 1, "entries": [{"start": 0, "oldText": "", "newText": "zzz"}]}
    )
    history, storage = make_history("main {}", stored=stored)

    assert history.undo() is False
    assert history.buffer.text == "main {}"
    assert stored_log(storage) == {"cursor": 0, "entries": []}


def test_oversized_log_is_trimmed_on_load() -> None:
    entries = [{"start": i, "oldText": "", "newText": "x"} for i in range(4)]
    stored = json.dumps({"cursor": 4, "entries": entries})

    history, _ = make_history("xxxx", stored=stored, limit=2)

    assert history.cursor == 2
    assert [entry.start for entry in history.entries] == [2, 3]


def test_record_change_logs_host_edit() -> None:
    history, _ = make_history("main {}")
    changes: List[int] = []
    history.on_change = lambda: changes.append(history.cursor)

    history.buffer.set_text("main { }")
    action = history.record_change("main {}", "main { }")

    assert action == EditAction(6, "", " ")
    assert history.record_change("same", "same") is None
    assert changes == [1]
    assert history.undo() is True
    assert history.buffer.text == "main {}"
