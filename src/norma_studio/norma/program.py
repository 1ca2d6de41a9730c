"""Runtime representation of a compiled Norma program."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Union

HALT_LABEL = "0"


@dataclass(frozen=True, slots=True)
class Operation:
    kind: str  # "inc" | "dec"
    register: str
    next_label: str

    def __str__(self) -> str:
        return f"do {self.kind} {self.register} goto {self.next_label}"


@dataclass(frozen=True, slots=True)
class Test:
    kind: str  # "zero"
    register: str
    then_label: str
    else_label: str

    def __str__(self) -> str:
        return (
            f"if {self.kind} {self.register} "
            f"then goto {self.then_label} else goto {self.else_label}"
        )


@dataclass(frozen=True, slots=True)
class Instruction:
    label: str
    body: Union[Operation, Test]

    def __str__(self) -> str:
        return f"{self.label}: {self.body}"


class Program:
    """Instructions keyed by label, in source order."""

    def __init__(self, instructions: Optional[Dict[str, Instruction]] = None) -> None:
        self._instructions: Dict[str, Instruction] = dict(instructions or {})

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions.values())

    def __len__(self) -> int:
        return len(self._instructions)

    @property
    def first_label(self) -> str:
        return next(iter(self._instructions), HALT_LABEL)

    def is_label_valid(self, label: str) -> bool:
        return label in self._instructions

    def instruction(self, label: str) -> Optional[Instruction]:
        return self._instructions.get(label)


__all__ = ["HALT_LABEL", "Instruction", "Operation", "Program", "Test"]
