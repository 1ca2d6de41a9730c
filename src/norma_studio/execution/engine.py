"""Capability interface between the studio and a compiler/VM engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Protocol, Sequence


@dataclass(frozen=True, slots=True)
class Span:
    rendered: str
    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True)
class Diagnostic:
    message: str
    span: Optional[Span] = None

    def render(self) -> str:
        if self.span is None:
            return f"ERROR: {self.message}"
        return f"ERROR: {self.span.rendered}\n\n{self.message}"


@dataclass(frozen=True, slots=True)
class StepStatus:
    running: bool
    current_label: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RegisterValue:
    name: str
    value: int


@dataclass(frozen=True, slots=True)
class InstructionInfo:
    label: str
    kind: str


@dataclass(frozen=True, slots=True)
class VmStatus:
    registers: tuple[RegisterValue, ...]
    steps: int
    current_label: Optional[str]
    running: bool = True


@dataclass(frozen=True, slots=True)
class VmData:
    instructions: tuple[InstructionInfo, ...]
    status: VmStatus


@dataclass(frozen=True, slots=True)
class VmSnapshot:
    """What the view shows after a step or batch."""

    running: bool
    current_label: Optional[str]
    registers: Mapping[str, int] = field(default_factory=dict)
    step_count: int = 0

    @classmethod
    def from_status(cls, status: VmStatus, *, running: bool) -> "VmSnapshot":
        return cls(
            running=running,
            current_label=status.current_label,
            registers={register.name: register.value for register in status.registers},
            step_count=status.steps,
        )


class EngineError(RuntimeError):
    """Base class for failures reported by an engine."""


class CompileError(EngineError):
    """Source rejected by the compiler; carries every diagnostic found."""

    def __init__(self, diagnostics: Sequence[Diagnostic]) -> None:
        self.diagnostics: List[Diagnostic] = list(diagnostics)
        count = len(self.diagnostics)
        first = self.diagnostics[0].message if self.diagnostics else "unknown error"
        super().__init__(f"{count} compile error(s): {first}")


class VmError(EngineError):
    """Runtime failure raised by a VM handle."""


class InvalidInputError(VmError):
    """The input value is not acceptable to the VM."""


class VmHandle(Protocol):
    def reset(self) -> None:
        ...

    def input(self, value: str) -> None:
        ...

    def run_steps(self, count: int) -> StepStatus:
        ...

    def data(self) -> VmData:
        ...

    def instructions(self) -> Sequence[InstructionInfo]:
        ...


Compiler = Callable[[str], VmHandle]


__all__ = [
    "Compiler",
    "CompileError",
    "Diagnostic",
    "EngineError",
    "InstructionInfo",
    "InvalidInputError",
    "RegisterValue",
    "Span",
    "StepStatus",
    "VmData",
    "VmError",
    "VmHandle",
    "VmSnapshot",
    "VmStatus",
]
