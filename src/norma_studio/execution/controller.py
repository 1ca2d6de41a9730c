"""Step/run/reset/abort control over a compiled VM handle."""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Sequence

from norma_studio.runtime import telemetry

from .engine import (
    CompileError,
    Compiler,
    Diagnostic,
    InstructionInfo,
    VmHandle,
    VmSnapshot,
)
from .scheduler import Cancellable, Scheduler

DEFAULT_DELAY_MS = 10
DEFAULT_RUN_BATCH = 10_000


class ControllerState(str, Enum):
    IDLE = "idle"
    COMPILED = "compiled"
    RUNNING = "running"
    HALTED = "halted"


class ControllerStateError(RuntimeError):
    """Operation not allowed in the controller's current state."""

    def __init__(self, operation: str, state: ControllerState) -> None:
        super().__init__(f"Cannot {operation} while {state.value}")
        self.operation = operation
        self.state = state


class EmptySourceError(ValueError):
    def __init__(self) -> None:
        super().__init__("empty input")


def _noop(*_args: object) -> None:
    return None


class ExecutionController:
    """Owns the VM handle for one compiled program and drives it.

    ``run`` executes on a cooperative tick loop through ``scheduler``. Every
    tick re-checks the state and the run generation before touching the VM,
    so a tick that fires after ``abort``/``reset``/``invalidate`` does
    nothing even if cancelling its timer failed.
    """

    def __init__(
        self,
        compiler: Compiler,
        scheduler: Scheduler,
        *,
        source: Callable[[], str] = lambda: "",
        input_value: Callable[[], str] = lambda: "0",
        on_snapshot: Callable[[VmSnapshot], None] = _noop,
        on_error: Callable[[Exception], None] = _noop,
        delay_ms: int = DEFAULT_DELAY_MS,
        run_batch: int = DEFAULT_RUN_BATCH,
    ) -> None:
        if run_batch < 1:
            raise ValueError("run_batch must be at least 1")
        self.compiler = compiler
        self.scheduler = scheduler
        self.source = source
        self.input_value = input_value
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.run_batch = run_batch
        self._delay_ms = 0
        self.set_delay(delay_ms)
        self._state = ControllerState.IDLE
        self._handle: Optional[VmHandle] = None
        self._generation = 0
        self._pending: Optional[Cancellable] = None
        self._last: Optional[VmSnapshot] = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def handle(self) -> Optional[VmHandle]:
        return self._handle

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def last_snapshot(self) -> Optional[VmSnapshot]:
        return self._last

    def set_delay(self, delay_ms: int) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms cannot be negative")
        self._delay_ms = int(delay_ms)

    def check(self, source: Optional[str] = None) -> List[Diagnostic]:
        """Compile without keeping the result; returns the diagnostics."""

        text = self._read_source(source)
        try:
            self.compiler(text)
        except CompileError as exc:
            return list(exc.diagnostics)
        return []

    def compile(self, source: Optional[str] = None) -> VmHandle:
        text = self._read_source(source)
        self.invalidate()
        try:
            with telemetry.span("execution::compile", metadata={"chars": len(text)}):
                handle = self.compiler(text)
        except CompileError as exc:
            telemetry.record_event(
                "execution.compile_failed",
                level="info",
                data={"errors": len(exc.diagnostics)},
            )
            raise
        handle.input(self.input_value())
        self._handle = handle
        self._state = ControllerState.COMPILED
        telemetry.record_event("execution.compiled", level="debug")
        return handle

    def invalidate(self) -> None:
        """Drop the compiled program; the next command compiles again."""

        self._cancel_pending()
        self._handle = None
        self._last = None
        self._state = ControllerState.IDLE

    def step(self) -> VmSnapshot:
        handle = self._ready("step")
        status = handle.run_steps(1)
        snapshot = self._read_snapshot(handle, status.running)
        self._last = snapshot
        if not snapshot.running:
            self._state = ControllerState.HALTED
        self.on_snapshot(snapshot)
        return snapshot

    def run(self, delay_ms: Optional[int] = None) -> None:
        handle = self._ready("run")
        if delay_ms is not None:
            self.set_delay(delay_ms)
        if self._state is ControllerState.HALTED:
            self._restart(handle)
        self._state = ControllerState.RUNNING
        self._generation += 1
        telemetry.record_event(
            "execution.run",
            level="debug",
            data={"delay_ms": self._delay_ms, "generation": self._generation},
        )
        self._schedule(self._generation, 0)

    def abort(self) -> None:
        if self._state is not ControllerState.RUNNING:
            raise ControllerStateError("abort", self._state)
        handle = self._handle
        if handle is None:
            raise ControllerStateError("abort", self._state)
        self._cancel_pending()
        finished = not handle.data().status.running
        self._state = ControllerState.HALTED if finished else ControllerState.COMPILED
        telemetry.record_event("execution.abort", level="debug")

    def reset(self) -> VmSnapshot:
        handle = self._ensure_compiled()
        self._cancel_pending()
        self._state = ControllerState.COMPILED
        self._restart(handle)
        snapshot = self._read_snapshot(handle, None)
        self._last = snapshot
        self.on_snapshot(snapshot)
        return snapshot

    def snapshot(self) -> VmSnapshot:
        """Current VM state without running anything or notifying."""

        handle = self._ensure_compiled()
        return self._read_snapshot(handle, None)

    def instructions(self) -> Sequence[InstructionInfo]:
        return tuple(self._ensure_compiled().instructions())

    def _read_source(self, source: Optional[str]) -> str:
        text = self.source() if source is None else source
        if not text.strip():
            raise EmptySourceError()
        return text

    def _ensure_compiled(self) -> VmHandle:
        if self._handle is None:
            return self.compile()
        return self._handle

    def _ready(self, operation: str) -> VmHandle:
        handle = self._ensure_compiled()
        if self._state not in (ControllerState.COMPILED, ControllerState.HALTED):
            raise ControllerStateError(operation, self._state)
        return handle

    def _restart(self, handle: VmHandle) -> None:
        handle.reset()
        handle.input(self.input_value())

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule(self, generation: int, delay_ms: int) -> None:
        self._pending = self.scheduler.call_later(
            delay_ms / 1000, lambda: self._tick(generation)
        )

    def _tick(self, generation: int) -> None:
        handle = self._handle
        if (
            generation != self._generation
            or self._state is not ControllerState.RUNNING
            or handle is None
        ):
            return
        self._pending = None
        batch = 1 if self._delay_ms > 0 else self.run_batch
        try:
            status = handle.run_steps(batch)
            snapshot = self._read_snapshot(handle, status.running)
        except Exception as exc:
            self._generation += 1
            self._state = ControllerState.COMPILED
            telemetry.record_event(
                "execution.tick_failed",
                level="error",
                data={"error": repr(exc), "batch": batch},
            )
            self.on_error(exc)
            return

        self._last = snapshot
        if not snapshot.running:
            self._state = ControllerState.HALTED
            telemetry.record_event(
                "execution.halted",
                level="debug",
                data={"steps": snapshot.step_count},
            )
        try:
            self.on_snapshot(snapshot)
        except Exception as exc:
            self._generation += 1
            if self._state is ControllerState.RUNNING:
                self._state = ControllerState.COMPILED
            telemetry.record_event(
                "execution.view_failed",
                level="error",
                data={"error": repr(exc)},
            )
            raise
        if self._state is ControllerState.RUNNING and generation == self._generation:
            self._schedule(generation, self._delay_ms)

    @staticmethod
    def _read_snapshot(handle: VmHandle, running: Optional[bool]) -> VmSnapshot:
        status = handle.data().status
        return VmSnapshot.from_status(
            status, running=status.running if running is None else running
        )


__all__ = [
    "ControllerState",
    "ControllerStateError",
    "EmptySourceError",
    "ExecutionController",
    "DEFAULT_DELAY_MS",
    "DEFAULT_RUN_BATCH",
]
