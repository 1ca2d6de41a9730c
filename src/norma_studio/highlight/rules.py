"""Lexical rules for Norma source, in tie-break order."""

from __future__ import annotations

from typing import Tuple

from .models import BracketDirection, BracketRole, LexicalRule

PARENS = "parens"
CURLY_BRACKETS = "curly-brackets"

RESERVED_WORDS = ("main", "if", "then", "else", "do", "goto", "operation", "test")
BUILTINS = ("inc", "dec", "zero", "add", "sub", "cmp")


def _words(words: Tuple[str, ...]) -> str:
    return "|".join(rf"\b{word}\b" for word in words)


def norma_rules() -> Tuple[LexicalRule, ...]:
    # Reserved words come before labels: "main" must not become a label.
    return (
        LexicalRule.build("comment", r"//.*"),
        LexicalRule.build("reserved", _words(RESERVED_WORDS)),
        LexicalRule.build("label", r"[a-zA-Z0-9_-]*:"),
        LexicalRule.build("builtin", _words(BUILTINS)),
        LexicalRule.build(
            "punctuation",
            r"\(",
            bracket=BracketRole(PARENS, BracketDirection.OPENING),
        ),
        LexicalRule.build(
            "punctuation",
            r"\)",
            bracket=BracketRole(PARENS, BracketDirection.CLOSING),
        ),
        LexicalRule.build(
            "punctuation",
            r"\{",
            bracket=BracketRole(CURLY_BRACKETS, BracketDirection.OPENING),
        ),
        LexicalRule.build(
            "punctuation",
            r"\}",
            bracket=BracketRole(CURLY_BRACKETS, BracketDirection.CLOSING),
        ),
    )


__all__ = ["norma_rules", "PARENS", "CURLY_BRACKETS", "RESERVED_WORDS", "BUILTINS"]
