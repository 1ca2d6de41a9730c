"""Register machine and interpreter behind the ``VmHandle`` interface."""

from __future__ import annotations

from typing import Dict, Tuple

from norma_studio.execution.engine import (
    InstructionInfo,
    InvalidInputError,
    RegisterValue,
    StepStatus,
    VmData,
    VmError,
    VmStatus,
)

from .program import Instruction, Operation, Program

INPUT_REGISTER = "X"
OUTPUT_REGISTER = "Y"


class Machine:
    """Natural-number registers; unknown registers start at zero."""

    def __init__(self, value: int = 0) -> None:
        self._registers: Dict[str, int] = {INPUT_REGISTER: value, OUTPUT_REGISTER: 0}

    def get(self, name: str) -> int:
        return self._registers.setdefault(name, 0)

    def inc(self, name: str) -> None:
        self._registers[name] = self.get(name) + 1

    def dec(self, name: str) -> None:
        self._registers[name] = max(0, self.get(name) - 1)

    def is_zero(self, name: str) -> bool:
        return self.get(name) == 0

    def input(self, value: int) -> None:
        self._registers[INPUT_REGISTER] = value

    def clear_all(self) -> None:
        for name in self._registers:
            self._registers[name] = 0

    def export(self) -> Tuple[RegisterValue, ...]:
        def order(name: str) -> Tuple[int, str]:
            if name == INPUT_REGISTER:
                return (0, name)
            if name == OUTPUT_REGISTER:
                return (1, name)
            return (2, name)

        return tuple(
            RegisterValue(name, self._registers[name])
            for name in sorted(self._registers, key=order)
        )


class Interpreter:
    def __init__(self, program: Program) -> None:
        self.program = program
        self.machine = Machine()
        self.current_label = program.first_label
        self.steps = 0

    @property
    def running(self) -> bool:
        return self.program.is_label_valid(self.current_label)

    def reset(self) -> None:
        self.machine.clear_all()
        self.current_label = self.program.first_label
        self.steps = 0

    def run_step(self) -> bool:
        instruction = self.program.instruction(self.current_label)
        if instruction is None:
            return False
        self.current_label = self._execute(instruction)
        self.steps += 1
        return True

    def run_steps(self, count: int) -> bool:
        for _ in range(count):
            if not self.run_step():
                return False
        return self.running

    def _execute(self, instruction: Instruction) -> str:
        body = instruction.body
        if isinstance(body, Operation):
            if body.kind == "inc":
                self.machine.inc(body.register)
            elif body.kind == "dec":
                self.machine.dec(body.register)
            else:
                raise VmError(f"Unknown operation {body.kind!r}")
            return body.next_label
        if body.kind != "zero":
            raise VmError(f"Unknown test {body.kind!r}")
        if self.machine.is_zero(body.register):
            return body.then_label
        return body.else_label


class NormaHandle:
    """``VmHandle`` over an in-process ``Interpreter``."""

    def __init__(self, program: Program) -> None:
        self.interpreter = Interpreter(program)

    def reset(self) -> None:
        self.interpreter.reset()

    def input(self, value: str) -> None:
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidInputError(f"Invalid input number: {value!r}")
        self.interpreter.machine.input(int(text))

    def run_steps(self, count: int) -> StepStatus:
        if count < 0:
            raise VmError("step count cannot be negative")
        running = self.interpreter.run_steps(count)
        return StepStatus(running, self.interpreter.current_label)

    def status(self) -> VmStatus:
        interpreter = self.interpreter
        return VmStatus(
            registers=interpreter.machine.export(),
            steps=interpreter.steps,
            current_label=interpreter.current_label,
            running=interpreter.running,
        )

    def data(self) -> VmData:
        return VmData(instructions=self.instructions(), status=self.status())

    def instructions(self) -> Tuple[InstructionInfo, ...]:
        return tuple(
            InstructionInfo(instruction.label, str(instruction.body))
            for instruction in self.interpreter.program
        )


__all__ = ["Interpreter", "Machine", "NormaHandle"]
