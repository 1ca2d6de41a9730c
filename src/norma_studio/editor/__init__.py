"""Editor session tying buffer, history, highlighting and keys together."""

from .session import DEFAULT_CODE_KEY, EditorHooks, EditorSession

__all__ = ["DEFAULT_CODE_KEY", "EditorHooks", "EditorSession"]
