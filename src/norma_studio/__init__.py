"""Editor and stepping debugger for Norma register machine programs."""

__all__ = [
    "adapters",
    "buffer",
    "config",
    "editor",
    "execution",
    "highlight",
    "keymaps",
    "norma",
    "runtime",
]

__version__ = "0.1.0"
