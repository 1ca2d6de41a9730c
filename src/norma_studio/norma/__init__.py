"""In-process Norma compiler and register machine.

``compile(source)`` satisfies the studio's ``Compiler`` interface: it returns
a ``NormaHandle`` or raises ``CompileError`` with every diagnostic found.
"""

from __future__ import annotations

from typing import List

from norma_studio.execution.engine import CompileError, Diagnostic

from .interpreter import Interpreter, Machine, NormaHandle
from .lexer import tokenize
from .parser import parse
from .program import Instruction, Operation, Program, Test


def compile_program(source: str) -> Program:
    diagnostics: List[Diagnostic] = []
    program = parse(tokenize(source, diagnostics), diagnostics)
    if diagnostics:
        raise CompileError(diagnostics)
    return program


def compile(source: str) -> NormaHandle:
    return NormaHandle(compile_program(source))


__all__ = [
    "Instruction",
    "Interpreter",
    "Machine",
    "NormaHandle",
    "Operation",
    "Program",
    "Test",
    "compile",
    "compile_program",
]
