"""Textual host: adapter surface plus the runnable app."""

from .controller import (
    PlaybackCommand,
    StudioUIHooks,
    TextualStudioAdapter,
    render_diagnostics,
)

__all__ = [
    "PlaybackCommand",
    "StudioUIHooks",
    "TextualStudioAdapter",
    "render_diagnostics",
]
