"""Adapter that wires the editor session and execution controller to UI hooks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from norma_studio.buffer import Storage
from norma_studio.config import StudioConfig
from norma_studio.editor import EditorHooks, EditorSession
from norma_studio.execution import (
    CompileError,
    Compiler,
    ControllerState,
    ControllerStateError,
    EmptySourceError,
    ExecutionController,
    InstructionInfo,
    Scheduler,
    VmError,
    VmSnapshot,
)
from norma_studio.highlight import RenderNode
from norma_studio.keymaps import KeyInput
from norma_studio.runtime import telemetry


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class StudioUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_code: Callable[[List[RenderNode]], None]
    update_position: Callable[[int, int], None] = _noop
    update_status: Callable[[str, bool], None] = _noop
    update_machine: Callable[[VmSnapshot], None] = _noop
    update_instructions: Callable[[Sequence[InstructionInfo]], None] = _noop
    log: Callable[[str], None] = _noop


class PlaybackCommand(str, Enum):
    CHECK = "check"
    STEP = "step"
    RUN = "run"
    RESET = "reset"
    ABORT = "abort"


EMPTY_INPUT_MESSAGE = "Empty input!"
CHECK_OK_MESSAGE = "Code OK!"


def render_diagnostics(error: CompileError) -> str:
    return "\n\n\n".join(diagnostic.render() for diagnostic in error.diagnostics)


class TextualStudioAdapter:
    """Bridges key events and playback commands to a Textual-friendly surface.

    The adapter owns one ``EditorSession`` and one ``ExecutionController``.
    Any edit to the source drops the compiled program so the next playback
    command compiles the new text.
    """

    def __init__(
        self,
        storage: Storage,
        compiler: Compiler,
        scheduler: Scheduler,
        hooks: StudioUIHooks,
        *,
        config: Optional[StudioConfig] = None,
    ) -> None:
        self.config = config or StudioConfig()
        self.hooks = hooks
        self.input_value = self.config.input_value
        self.session = EditorSession(
            storage,
            hooks=EditorHooks(
                render=hooks.update_code,
                position=hooks.update_position,
                text_changed=self._source_changed,
            ),
            code_key=self.config.code_key,
            history_key=self.config.history_key,
            history_limit=self.config.history_limit,
        )
        self.controller = ExecutionController(
            compiler,
            scheduler,
            source=lambda: self.session.text,
            input_value=lambda: self.input_value,
            on_snapshot=self._on_snapshot,
            on_error=self._on_tick_error,
            delay_ms=self.config.default_delay_ms,
            run_batch=self.config.run_batch,
        )
        self.session.load()

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> bool:
        """Translate a Textual key event into a KeyInput and dispatch it."""

        key_input = KeyInput(key=key, text=text, modifiers=tuple(modifiers))
        handled = self.session.handle_key(key_input)
        self._log_state("key ->", key=key_input.token, handled=handled)
        return handled

    def command(self, command: PlaybackCommand) -> None:
        """Run a playback command, reporting failures through the status hook."""

        self._log_state("command ->", command=command.value)
        try:
            if command is PlaybackCommand.CHECK:
                self._check()
            elif command is PlaybackCommand.STEP:
                self.controller.step()
            elif command is PlaybackCommand.RUN:
                self.controller.run()
                self.hooks.update_status("Running...", True)
            elif command is PlaybackCommand.RESET:
                self.controller.reset()
                self.hooks.update_status("Reset", True)
            elif command is PlaybackCommand.ABORT:
                self.controller.abort()
                self.hooks.update_status("Aborted", True)
        except EmptySourceError:
            self.hooks.update_status(EMPTY_INPUT_MESSAGE, False)
        except CompileError as exc:
            self.hooks.update_status(render_diagnostics(exc), False)
        except (ControllerStateError, VmError) as exc:
            self.hooks.update_status(str(exc), False)
        else:
            self._publish_instructions()

    def set_input(self, value: str) -> None:
        """Input for register X, applied on the next compile or reset."""

        self.input_value = value.strip() or "0"
        self.hooks.update_status(f"Input X = {self.input_value}", True)

    def set_delay(self, delay_ms: int) -> None:
        self.controller.set_delay(delay_ms)
        self.hooks.update_status(f"Wait between steps (ms): {delay_ms}", True)

    def _check(self) -> None:
        diagnostics = self.controller.check()
        if diagnostics:
            self.hooks.update_status(render_diagnostics(CompileError(diagnostics)), False)
        else:
            self.hooks.update_status(CHECK_OK_MESSAGE, True)

    def _publish_instructions(self) -> None:
        if self.controller.state is not ControllerState.IDLE:
            self.hooks.update_instructions(self.controller.instructions())

    def _source_changed(self, _text: str) -> None:
        if self.controller.state is not ControllerState.IDLE:
            self.controller.invalidate()
            self.hooks.update_status("Source changed; program will be recompiled", True)

    def _on_snapshot(self, snapshot: VmSnapshot) -> None:
        self.hooks.update_machine(snapshot)
        if not snapshot.running:
            self.hooks.update_status(f"Halted after {snapshot.step_count} steps", True)
        self._log_state(
            "snapshot <-",
            label=snapshot.current_label,
            steps=snapshot.step_count,
            running=snapshot.running,
        )

    def _on_tick_error(self, error: Exception) -> None:
        self.hooks.update_status(f"Execution failed: {error}", False)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        line = " ".join(parts)
        self.hooks.log(line)
        telemetry.record_event("adapter.state", level="debug", data={"line": line})

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.session.buffer
        return {
            "controller": self.controller.state.value,
            "selection": buffer.state.selection,
            "buffer_version": buffer.version,
            "history_cursor": self.session.history.cursor,
        }


__all__ = [
    "PlaybackCommand",
    "StudioUIHooks",
    "TextualStudioAdapter",
    "render_diagnostics",
]
