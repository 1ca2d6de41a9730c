"""Lexer for Norma source."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from norma_studio.execution.engine import Diagnostic, Span


class TokenType(str, Enum):
    DO = "do"
    ELSE = "else"
    GOTO = "goto"
    IF = "if"
    MAIN = "main"
    THEN = "then"
    INC = "inc"
    DEC = "dec"
    ZERO = "zero"
    NUMBER = "<number>"
    IDENTIFIER = "<identifier>"
    COLON = ":"
    COMMA = ","
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    OPEN_CURLY = "{"
    CLOSE_CURLY = "}"


KEYWORDS = {
    token.value: token
    for token in (
        TokenType.DO,
        TokenType.ELSE,
        TokenType.GOTO,
        TokenType.IF,
        TokenType.MAIN,
        TokenType.THEN,
        TokenType.INC,
        TokenType.DEC,
        TokenType.ZERO,
    )
}

PUNCTUATION = {
    token.value: token
    for token in (
        TokenType.COLON,
        TokenType.COMMA,
        TokenType.OPEN_PAREN,
        TokenType.CLOSE_PAREN,
        TokenType.OPEN_CURLY,
        TokenType.CLOSE_CURLY,
    )
}


@dataclass(frozen=True, slots=True)
class Position:
    line: int = 1
    column: int = 1
    offset: int = 0

    def advance(self, character: str) -> "Position":
        if character == "\n":
            return Position(self.line + 1, 1, self.offset + 1)
        return Position(self.line, self.column + 1, self.offset + 1)

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Half-open range ``[start, end)`` of the source."""

    start: Position
    end: Position

    def render(self) -> str:
        last = Position(self.end.line, max(1, self.end.column - 1), self.end.offset)
        if self.start.line != self.end.line:
            return f"from {self.start} to {last}"
        if self.start.column + 1 >= self.end.column:
            return f"at {self.start}"
        return f"from {self.start} to column {last.column}"

    def export(self) -> Span:
        return Span(self.render(), self.start.offset, self.end.offset)


@dataclass(frozen=True, slots=True)
class Token:
    type: TokenType
    content: str
    span: SourceSpan


def error(message: str, span: SourceSpan | None) -> Diagnostic:
    return Diagnostic(message, span.export() if span is not None else None)


def _is_identifier(character: str) -> bool:
    return character == "_" or (character.isascii() and character.isalnum())


class Lexer:
    def __init__(self, source: str) -> None:
        self.source = source
        self.index = 0
        self.position = Position()

    def peek(self) -> str:
        return self.source[self.index] if self.index < len(self.source) else ""

    def bump(self) -> str:
        character = self.peek()
        if character:
            self.index += 1
            self.position = self.position.advance(character)
        return character

    def tokenize(self, diagnostics: List[Diagnostic]) -> List[Token]:
        tokens: List[Token] = []
        while True:
            self._skip_discardable(diagnostics)
            character = self.peek()
            if not character:
                return tokens
            start = self.position
            if _is_identifier(character):
                begin = self.index
                while _is_identifier(self.peek()):
                    self.bump()
                content = self.source[begin : self.index]
                span = SourceSpan(start, self.position)
                tokens.append(Token(self._classify(content), content, span))
            elif character in PUNCTUATION:
                self.bump()
                span = SourceSpan(start, self.position)
                tokens.append(Token(PUNCTUATION[character], character, span))
            else:
                self.bump()
                span = SourceSpan(start, self.position)
                diagnostics.append(error(f"Invalid character {character!r}", span))

    def _skip_discardable(self, diagnostics: List[Diagnostic]) -> None:
        while True:
            character = self.peek()
            if character and character.isspace():
                self.bump()
            elif character == "/":
                start = self.position
                self.bump()
                if self.peek() == "/":
                    self.bump()
                else:
                    span = SourceSpan(start, self.position)
                    diagnostics.append(error("Invalid comment start", span))
                while self.peek() not in ("", "\n"):
                    self.bump()
            else:
                return

    @staticmethod
    def _classify(content: str) -> TokenType:
        if content.isdigit():
            return TokenType.NUMBER
        return KEYWORDS.get(content, TokenType.IDENTIFIER)


def tokenize(source: str, diagnostics: List[Diagnostic]) -> List[Token]:
    return Lexer(source).tokenize(diagnostics)


__all__ = ["Lexer", "Position", "SourceSpan", "Token", "TokenType", "tokenize"]
