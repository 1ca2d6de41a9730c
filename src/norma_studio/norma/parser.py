"""Parser for the ``main { ... }`` block of a Norma program.

Errors are collected rather than raised: after a malformed instruction the
parser skips ahead to the next ``label:`` (or the closing brace) and keeps
going, so one compile reports every problem it can find.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from norma_studio.execution.engine import Diagnostic

from .lexer import Token, TokenType, error
from .program import Instruction, Operation, Program, Test

LABEL_TYPES = (TokenType.NUMBER, TokenType.IDENTIFIER)


class Parser:
    def __init__(self, tokens: List[Token], diagnostics: List[Diagnostic]) -> None:
        self.tokens = tokens
        self.diagnostics = diagnostics
        self.index = 0

    def peek(self, ahead: int = 0) -> Optional[Token]:
        position = self.index + ahead
        return self.tokens[position] if position < len(self.tokens) else None

    def bump(self) -> Optional[Token]:
        token = self.peek()
        if token is not None:
            self.index += 1
        return token

    def expect(self, *types: TokenType) -> Optional[Token]:
        token = self.peek()
        if token is not None and token.type in types:
            return self.bump()
        self._unexpected(token, types)
        return None

    def parse(self) -> Program:
        main: Optional[Dict[str, Instruction]] = None
        while (token := self.peek()) is not None:
            if token.type is not TokenType.MAIN:
                self._unexpected(token, (TokenType.MAIN,))
                self.bump()
                continue
            body = self._parse_main()
            if main is None:
                main = body
            else:
                self.diagnostics.append(
                    error("main is already declared in this program", token.span)
                )
        if main is None:
            self.diagnostics.append(error("main is not declared in this program", None))
        return Program(main)

    def _parse_main(self) -> Dict[str, Instruction]:
        self.bump()
        instructions: Dict[str, Instruction] = {}
        if self.expect(TokenType.OPEN_CURLY) is None:
            self._recover()
        while True:
            token = self.peek()
            if token is None:
                self._unexpected(None, (TokenType.CLOSE_CURLY,))
                return instructions
            if token.type is TokenType.CLOSE_CURLY:
                self.bump()
                return instructions
            if token.type is TokenType.MAIN:
                self._unexpected(token, (TokenType.CLOSE_CURLY,))
                return instructions
            instruction = self._parse_instruction()
            if instruction is None:
                self._recover()
            elif instruction.label in instructions:
                self.diagnostics.append(
                    error(
                        f"Label {instruction.label!r} is already declared",
                        token.span,
                    )
                )
            else:
                instructions[instruction.label] = instruction

    def _parse_instruction(self) -> Optional[Instruction]:
        label = self.expect(*LABEL_TYPES)
        if label is None or self.expect(TokenType.COLON) is None:
            return None
        head = self.expect(TokenType.DO, TokenType.IF)
        if head is None:
            return None
        if head.type is TokenType.DO:
            body = self._parse_operation()
        else:
            body = self._parse_test()
        if body is None:
            return None
        return Instruction(label.content, body)

    def _parse_operation(self) -> Optional[Operation]:
        kind = self.expect(TokenType.INC, TokenType.DEC)
        if kind is None:
            return None
        register = self._parse_register()
        if register is None or self.expect(TokenType.GOTO) is None:
            return None
        target = self.expect(*LABEL_TYPES)
        if target is None:
            return None
        return Operation(kind.content, register, target.content)

    def _parse_test(self) -> Optional[Test]:
        kind = self.expect(TokenType.ZERO)
        if kind is None:
            return None
        register = self._parse_register()
        if register is None:
            return None
        if self.expect(TokenType.THEN) is None or self.expect(TokenType.GOTO) is None:
            return None
        then_label = self.expect(*LABEL_TYPES)
        if then_label is None:
            return None
        if self.expect(TokenType.ELSE) is None or self.expect(TokenType.GOTO) is None:
            return None
        else_label = self.expect(*LABEL_TYPES)
        if else_label is None:
            return None
        return Test(kind.content, register, then_label.content, else_label.content)

    def _parse_register(self) -> Optional[str]:
        token = self.peek()
        wrapped = token is not None and token.type is TokenType.OPEN_PAREN
        if wrapped:
            self.bump()
        name = self.expect(TokenType.IDENTIFIER)
        if name is None:
            return None
        if wrapped and self.expect(TokenType.CLOSE_PAREN) is None:
            return None
        return name.content

    def _recover(self) -> None:
        while (token := self.peek()) is not None:
            if token.type in (TokenType.CLOSE_CURLY, TokenType.MAIN):
                return
            following = self.peek(1)
            if (
                token.type in LABEL_TYPES
                and following is not None
                and following.type is TokenType.COLON
            ):
                return
            self.bump()

    def _unexpected(
        self, token: Optional[Token], expected: Sequence[TokenType]
    ) -> None:
        wanted = ", ".join(f"'{kind.value}'" for kind in expected)
        if token is None:
            last = self.tokens[-1].span if self.tokens else None
            self.diagnostics.append(
                error(f"Unexpected end of input, expected {wanted}", last)
            )
        else:
            self.diagnostics.append(
                error(
                    f"Unexpected token {token.content!r}, expected {wanted}",
                    token.span,
                )
            )


def parse(tokens: List[Token], diagnostics: List[Diagnostic]) -> Program:
    return Parser(tokens, diagnostics).parse()


__all__ = ["Parser", "parse"]
