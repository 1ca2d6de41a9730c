from __future__ import annotations

from typing import Callable, List, Optional

import pytest

from norma_studio.execution import (
    InstructionInfo,
    RegisterValue,
    StepStatus,
    VmData,
    VmError,
    VmStatus,
)
from norma_studio.runtime import telemetry

telemetry.configure(preset="quiet")


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects timers and fires them only when asked.

    With ``honor_cancel=False`` cancelled timers still fire, which models a
    host whose timer cancellation cannot be relied on.
    """

    def __init__(self, *, honor_cancel: bool = True) -> None:
        self.honor_cancel = honor_cancel
        self.timers: List[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> List[ManualTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def fire_next(self) -> bool:
        if not self.timers:
            return False
        timer = self.timers.pop(0)
        if not timer.cancelled or not self.honor_cancel:
            timer.callback()
        return True

    def run_all(self, limit: int = 1000) -> int:
        fired = 0
        while fired < limit and self.fire_next():
            fired += 1
        return fired


class StubHandle:
    """VM handle double that halts or fails after a number of batches."""

    def __init__(
        self,
        *,
        halt_after: Optional[int] = None,
        fail_on: Optional[int] = None,
    ) -> None:
        self.halt_after = halt_after
        self.fail_on = fail_on
        self.batches: List[int] = []
        self.inputs: List[str] = []
        self.resets = 0
        self.steps = 0
        self.running = True

    @property
    def label(self) -> str:
        return f"L{self.steps}" if self.running else "0"

    def reset(self) -> None:
        self.resets += 1
        self.batches.clear()
        self.steps = 0
        self.running = True

    def input(self, value: str) -> None:
        self.inputs.append(value)

    def run_steps(self, count: int) -> StepStatus:
        self.batches.append(count)
        if self.fail_on is not None and len(self.batches) >= self.fail_on:
            raise VmError("engine exploded")
        if self.running:
            self.steps += count
        if self.halt_after is not None and len(self.batches) >= self.halt_after:
            self.running = False
        return StepStatus(self.running, self.label)

    def data(self) -> VmData:
        return VmData(
            instructions=self.instructions(),
            status=VmStatus(
                registers=(RegisterValue("X", 0), RegisterValue("Y", self.steps)),
                steps=self.steps,
                current_label=self.label,
                running=self.running,
            ),
        )

    def instructions(self) -> tuple[InstructionInfo, ...]:
        return (InstructionInfo("1", "do inc Y goto 1"),)


class StubCompiler:
    def __init__(self, handle: StubHandle) -> None:
        self.handle = handle
        self.sources: List[str] = []

    def __call__(self, source: str) -> StubHandle:
        self.sources.append(source)
        return self.handle


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def unreliable_scheduler() -> ManualScheduler:
    return ManualScheduler(honor_cancel=False)


@pytest.fixture
def make_handle() -> Callable[..., StubHandle]:
    return StubHandle


@pytest.fixture
def make_compiler() -> Callable[[StubHandle], StubCompiler]:
    return StubCompiler
