from __future__ import annotations

from typing import List

import pytest

from norma_studio import norma
from norma_studio.execution import (
    CompileError,
    ControllerState,
    ControllerStateError,
    Diagnostic,
    EmptySourceError,
    ExecutionController,
    InvalidInputError,
    Span,
    VmError,
    VmSnapshot,
)

SCENARIO = "main { 1: do inc X goto 2 2: do inc Y goto 0 }"


def make_controller(compiler, scheduler, snapshots: List[VmSnapshot], **kwargs):
    kwargs.setdefault("source", lambda: "main { }")
    return ExecutionController(
        compiler, scheduler, on_snapshot=snapshots.append, **kwargs
    )


def test_step_on_compiled_norma_program(scheduler) -> None:
    snapshots: List[VmSnapshot] = []
    controller = make_controller(norma.compile, scheduler, snapshots)

    controller.compile(SCENARIO)
    snapshot = controller.step()

    assert snapshot.step_count == 1
    assert snapshot.current_label
    assert snapshot.current_label == "2"
    assert snapshot.registers["X"] == 1
    assert snapshots == [snapshot]
    assert controller.state is ControllerState.COMPILED


def test_step_until_program_halts(scheduler) -> None:
    snapshots: List[VmSnapshot] = []
    controller = make_controller(norma.compile, scheduler, snapshots)
    controller.compile(SCENARIO)

    controller.step()
    last = controller.step()

    assert last.running is False
    assert last.step_count == 2
    assert controller.state is ControllerState.HALTED
    assert list(last.registers) == ["X", "Y"]


def test_lazy_compile_happens_once(scheduler, make_handle, make_compiler) -> None:
    compiler = make_compiler(make_handle())
    snapshots: List[VmSnapshot] = []
    controller = make_controller(compiler, scheduler, snapshots)

    controller.step()
    controller.step()

    assert compiler.sources == ["main { }"]
    assert [s.step_count for s in snapshots] == [1, 2]


def test_empty_source_is_rejected_before_compiling(
    scheduler, make_handle, make_compiler
) -> None:
    compiler = make_compiler(make_handle())
    controller = make_controller(compiler, scheduler, [], source=lambda: "  \n")

    with pytest.raises(EmptySourceError, match="empty input"):
        controller.step()

    assert compiler.sources == []
    assert controller.state is ControllerState.IDLE


def test_compile_error_is_surfaced_unmodified(scheduler) -> None:
    diagnostics = [
        Diagnostic("first", Span("at line 1, column 1", 0, 1)),
        Diagnostic("second", None),
    ]

    def failing(_source: str):
        raise CompileError(diagnostics)

    controller = make_controller(failing, scheduler, [])

    with pytest.raises(CompileError) as excinfo:
        controller.compile("main {")

    assert excinfo.value.diagnostics == diagnostics
    assert controller.state is ControllerState.IDLE
    assert controller.handle is None


def test_recompile_discards_previous_handle(scheduler) -> None:
    controller = make_controller(norma.compile, scheduler, [])

    first = controller.compile(SCENARIO)
    second = controller.compile(SCENARIO)

    assert first is not second
    assert controller.handle is second


def test_run_without_delay_uses_large_batches(
    scheduler, make_handle, make_compiler
) -> None:
    handle = make_handle(halt_after=1)
    snapshots: List[VmSnapshot] = []
    controller = make_controller(make_compiler(handle), scheduler, snapshots)

    controller.run(0)
    scheduler.run_all()

    assert len(snapshots) == 1
    assert handle.batches == [controller.run_batch]
    assert controller.state is ControllerState.HALTED
    assert scheduler.pending() == []


def test_run_with_delay_steps_one_at_a_time(
    scheduler, make_handle, make_compiler
) -> None:
    handle = make_handle(halt_after=3)
    snapshots: List[VmSnapshot] = []
    controller = make_controller(make_compiler(handle), scheduler, snapshots)

    controller.run(10)
    assert controller.state is ControllerState.RUNNING
    assert snapshots == []

    scheduler.fire_next()
    assert scheduler.timers[0].delay == pytest.approx(0.01)
    scheduler.run_all()

    assert handle.batches == [1, 1, 1]
    assert [s.step_count for s in snapshots] == [1, 2, 3]
    assert [s.running for s in snapshots] == [True, True, False]
    assert controller.state is ControllerState.HALTED


def test_abort_before_first_tick_emits_nothing(
    unreliable_scheduler, make_handle, make_compiler
) -> None:
    handle = make_handle()
    snapshots: List[VmSnapshot] = []
    controller = make_controller(make_compiler(handle), unreliable_scheduler, snapshots)

    controller.run(10)
    controller.abort()
    unreliable_scheduler.run_all()

    assert snapshots == []
    assert handle.batches == []
    assert controller.state is ControllerState.COMPILED


def test_abort_from_snapshot_callback_stops_loop(
    scheduler, make_handle, make_compiler
) -> None:
    handle = make_handle()
    snapshots: List[VmSnapshot] = []
    controller = make_controller(make_compiler(handle), scheduler, snapshots)
    controller.on_snapshot = lambda snap: (snapshots.append(snap), controller.abort())

    controller.run(5)
    scheduler.run_all()

    assert len(snapshots) == 1
    assert controller.state is ControllerState.COMPILED
    assert scheduler.pending() == []


def test_abort_requires_running(scheduler, make_handle, make_compiler) -> None:
    controller = make_controller(make_compiler(make_handle()), scheduler, [])
    controller.compile()

    with pytest.raises(ControllerStateError):
        controller.abort()


def test_step_while_running_is_rejected(scheduler, make_handle, make_compiler) -> None:
    controller = make_controller(make_compiler(make_handle()), scheduler, [])
    controller.run(10)

    with pytest.raises(ControllerStateError):
        controller.step()
    with pytest.raises(ControllerStateError):
        controller.run(10)


def test_reset_resyncs_and_cancels_pending_tick(
    unreliable_scheduler, make_handle, make_compiler
) -> None:
    handle = make_handle()
    snapshots: List[VmSnapshot] = []
    controller = make_controller(
        make_compiler(handle),
        unreliable_scheduler,
        snapshots,
        input_value=lambda: "7",
    )
    controller.step()
    controller.run(5)

    reset_snapshot = controller.reset()
    unreliable_scheduler.run_all()

    assert snapshots[-1] is reset_snapshot
    assert reset_snapshot.step_count == 0
    assert handle.resets == 1
    assert handle.inputs == ["7", "7"]
    assert controller.state is ControllerState.COMPILED


def test_tick_failure_ends_run_cycle(scheduler, make_handle, make_compiler) -> None:
    handle = make_handle(fail_on=2)
    snapshots: List[VmSnapshot] = []
    errors: List[Exception] = []
    controller = make_controller(
        make_compiler(handle), scheduler, snapshots, on_error=errors.append
    )

    controller.run(1)
    scheduler.run_all()

    assert len(snapshots) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], VmError)
    assert controller.state is ControllerState.COMPILED
    assert scheduler.pending() == []


def test_run_after_halt_restarts_program(scheduler, make_handle, make_compiler) -> None:
    handle = make_handle(halt_after=1)
    snapshots: List[VmSnapshot] = []
    controller = make_controller(make_compiler(handle), scheduler, snapshots)
    controller.step()
    assert controller.state is ControllerState.HALTED

    controller.run(0)
    scheduler.run_all()

    assert handle.resets == 1
    assert snapshots[-1].step_count == controller.run_batch


def test_invalidate_returns_to_idle(scheduler, make_handle, make_compiler) -> None:
    controller = make_controller(make_compiler(make_handle()), scheduler, [])
    controller.run(10)

    controller.invalidate()
    scheduler.run_all()

    assert controller.state is ControllerState.IDLE
    assert controller.handle is None


def test_check_reports_diagnostics_without_compiling(scheduler) -> None:
    controller = make_controller(norma.compile, scheduler, [])

    assert controller.check(SCENARIO) == []
    diagnostics = controller.check("main { 1: do jump X goto 0 }")

    assert diagnostics
    assert controller.state is ControllerState.IDLE


def test_negative_delay_is_rejected(scheduler) -> None:
    controller = make_controller(norma.compile, scheduler, [])

    with pytest.raises(ValueError):
        controller.set_delay(-1)


def test_snapshot_reads_state_without_notifying(scheduler) -> None:
    snapshots: List[VmSnapshot] = []
    controller = make_controller(
        norma.compile, scheduler, snapshots, source=lambda: SCENARIO
    )

    snapshot = controller.snapshot()

    assert snapshot.step_count == 0
    assert snapshot.current_label == "1"
    assert snapshots == []
    assert controller.state is ControllerState.COMPILED
    assert [info.label for info in controller.instructions()] == ["1", "2"]


def test_reset_with_rejected_input_leaves_controller_compiled(scheduler) -> None:
    value = {"input": "0"}
    controller = make_controller(
        norma.compile,
        scheduler,
        [],
        source=lambda: SCENARIO,
        input_value=lambda: value["input"],
    )
    controller.run(10)
    scheduler.fire_next()

    value["input"] = "abc"
    with pytest.raises(InvalidInputError):
        controller.reset()

    assert controller.state is ControllerState.COMPILED
    assert scheduler.pending() == []

    value["input"] = "0"
    assert controller.step().step_count == 1


def test_failing_snapshot_callback_ends_run_cycle(
    scheduler, make_handle, make_compiler
) -> None:
    handle = make_handle()

    def broken_view(_snapshot: VmSnapshot) -> None:
        raise RuntimeError("view gone")

    controller = make_controller(make_compiler(handle), scheduler, [])
    controller.on_snapshot = broken_view
    controller.run(10)

    with pytest.raises(RuntimeError, match="view gone"):
        scheduler.fire_next()

    assert controller.state is ControllerState.COMPILED
    assert scheduler.pending() == []
    assert handle.batches == [1]
