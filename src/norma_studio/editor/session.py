"""Editor session: buffer, history and highlighter wired to a host view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from norma_studio.buffer import EditAction, EditHistory, Storage, TextBuffer
from norma_studio.buffer.undo import DEFAULT_HISTORY_KEY
from norma_studio.highlight import Highlighter, RenderNode
from norma_studio.keymaps import KeyAction, KeyInput, KeyResolver

DEFAULT_CODE_KEY = "norma_studio.userCode"
INDENT = "    "


def _noop(*_args: object) -> None:
    return None


@dataclass(slots=True)
class EditorHooks:
    """Callbacks the session uses to push state to the host."""

    render: Callable[[List[RenderNode]], None] = _noop
    position: Callable[[int, int], None] = _noop
    text_changed: Callable[[str], None] = _noop


class EditorSession:
    """Owns one buffer and routes every mutation through its history.

    Each mutation (and each caret move) re-renders through ``hooks.render``
    and writes the source text back to ``storage``.
    """

    def __init__(
        self,
        storage: Storage,
        *,
        hooks: Optional[EditorHooks] = None,
        highlighter: Optional[Highlighter] = None,
        resolver: Optional[KeyResolver] = None,
        buffer: Optional[TextBuffer] = None,
        code_key: str = DEFAULT_CODE_KEY,
        history_key: str = DEFAULT_HISTORY_KEY,
        history_limit: int = 500,
    ) -> None:
        self.storage = storage
        self.hooks = hooks or EditorHooks()
        self.highlighter = highlighter or Highlighter.default()
        self.resolver = resolver or KeyResolver()
        self.buffer = buffer or TextBuffer()
        self.code_key = code_key
        self.history = EditHistory(
            self.buffer,
            storage,
            limit=history_limit,
            on_change=self.refresh,
            key=history_key,
        )
        self._seen_version = self.buffer.version

    @property
    def text(self) -> str:
        return self.buffer.text

    def load(self) -> None:
        """Restore the saved source and its history."""

        self.buffer.set_text(self.storage.get(self.code_key) or "", caret=0)
        self.history.load()
        self.refresh()

    def refresh(self) -> List[RenderNode]:
        start, end = self.buffer.state.selection
        nodes = self.highlighter.render(self.buffer.text, start, end)
        self.storage.set(self.code_key, self.buffer.text)
        self.hooks.render(nodes)
        self.hooks.position(*self.buffer.line_column())
        if self.buffer.version != self._seen_version:
            self._seen_version = self.buffer.version
            self.hooks.text_changed(self.buffer.text)
        return nodes

    def apply_and_record(self, action: EditAction, *, caret: Optional[int] = None) -> None:
        self.history.apply_and_record(action, caret=caret)

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def move_caret(self, offset: int) -> None:
        self.buffer.move_caret(offset)
        self.refresh()

    def select(self, start: int, end: int) -> None:
        self.buffer.select(start, end)
        self.refresh()

    def insert(self, text: str, *, caret_shift: Optional[int] = None) -> None:
        """Replace the selection with ``text``.

        ``caret_shift`` places the caret that many characters after the
        insertion point instead of after the inserted text.
        """

        start, end = self.buffer.state.selection
        action = EditAction(start, self.buffer.text[start:end], text)
        caret = None if caret_shift is None else start + caret_shift
        self.apply_and_record(action, caret=caret)

    def delete_backward(self) -> bool:
        start, end = self.buffer.state.selection
        if start != end:
            self.apply_and_record(EditAction(start, self.buffer.text[start:end], ""))
            return True
        if start == 0:
            return False
        self.apply_and_record(EditAction(start - 1, self.buffer.text[start - 1], ""))
        return True

    def is_between(self, opening: str, closing: str) -> bool:
        return (
            self.buffer.state.collapsed
            and self.buffer.char_before() == opening
            and self.buffer.char_at() == closing
        )

    def handle_key(self, key: KeyInput) -> bool:
        """Run the editing behaviour bound to ``key``; False when unhandled."""

        action = self.resolver.resolve(key)
        if action is KeyAction.TAB:
            self.insert(INDENT)
        elif action is KeyAction.ENTER:
            if self.is_between("{", "}"):
                self.insert(f"\n{INDENT}\n", caret_shift=1 + len(INDENT))
            else:
                self.insert("\n")
        elif action is KeyAction.BACKSPACE:
            if self.is_between("{", "}") or self.is_between("(", ")"):
                caret = self.buffer.caret
                pair = self.buffer.text[caret - 1 : caret + 1]
                self.apply_and_record(EditAction(caret - 1, pair, ""))
            else:
                return self.delete_backward()
        elif action is KeyAction.OPEN_PAREN:
            self.insert("()", caret_shift=1)
        elif action is KeyAction.OPEN_CURLY:
            self.insert("{}", caret_shift=1)
        elif action is KeyAction.UNDO:
            return self.undo()
        elif action is KeyAction.REDO:
            return self.redo()
        elif action is KeyAction.INSERT and key.text:
            self.insert(key.text)
        elif action in _MOVES:
            self.move_caret(self._move_target(action))
        else:
            return False
        return True

    def _move_target(self, action: KeyAction) -> int:
        caret = self.buffer.caret
        line, column = self.buffer.line_column()
        if action is KeyAction.LEFT:
            return max(0, caret - 1)
        if action is KeyAction.RIGHT:
            return min(len(self.buffer.text), caret + 1)
        if action is KeyAction.UP:
            return 0 if line == 1 else self.buffer.offset_for(line - 1, column)
        if action is KeyAction.DOWN:
            if line == self.buffer.text.count("\n") + 1:
                return len(self.buffer.text)
            return self.buffer.offset_for(line + 1, column)
        if action is KeyAction.HOME:
            return caret - (column - 1)
        return self.buffer.offset_for(line, len(self.buffer.text) + 1)


_MOVES = frozenset(
    {
        KeyAction.LEFT,
        KeyAction.RIGHT,
        KeyAction.UP,
        KeyAction.DOWN,
        KeyAction.HOME,
        KeyAction.END,
    }
)


__all__ = ["EditorSession", "EditorHooks", "DEFAULT_CODE_KEY"]
