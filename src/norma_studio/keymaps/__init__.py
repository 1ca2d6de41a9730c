"""Key input normalization and editor key actions."""

from .models import KeyAction, KeyInput
from .resolver import DEFAULT_BINDINGS, KeyResolver

__all__ = ["DEFAULT_BINDINGS", "KeyAction", "KeyInput", "KeyResolver"]
