"""Syntax highlighting: tokenizer, bracket matcher and renderer."""

from .brackets import BracketStackEntry, match_brackets, touches_cursor
from .highlighter import Highlighter
from .models import (
    LINKED_CLASS,
    BracketDirection,
    BracketRole,
    Fragment,
    LexicalRule,
    RenderNode,
)
from .rules import CURLY_BRACKETS, PARENS, norma_rules
from .tokenizer import Tokenizer, combine_rules

__all__ = [
    "BracketDirection",
    "BracketRole",
    "BracketStackEntry",
    "CURLY_BRACKETS",
    "Fragment",
    "Highlighter",
    "LINKED_CLASS",
    "LexicalRule",
    "PARENS",
    "RenderNode",
    "Tokenizer",
    "combine_rules",
    "match_brackets",
    "norma_rules",
    "touches_cursor",
]
