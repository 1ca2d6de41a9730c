"""Executable Textual app hosting the Norma editor and stepper."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when the app is run
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal, Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use norma_studio.adapters.textual.app"
    ) from exc

from norma_studio import norma
from norma_studio.buffer import JsonFileStorage
from norma_studio.config import StudioConfig
from norma_studio.execution import AsyncioScheduler, InstructionInfo, VmSnapshot
from norma_studio.highlight import LINKED_CLASS, RenderNode
from norma_studio.runtime import telemetry

from .controller import PlaybackCommand, StudioUIHooks, TextualStudioAdapter

CLASS_STYLES = {
    "comment": "dim italic",
    "reserved": "bold magenta",
    "label": "bold cyan",
    "builtin": "green",
    "punctuation": "yellow",
}
LINKED_STYLE = "bold reverse"
DELAY_STEP_MS = 50


def render_nodes(nodes: Sequence[RenderNode], caret: Optional[int] = None) -> Text:
    """Build a Rich ``Text`` from render nodes, marking the caret."""

    text = Text(no_wrap=True)
    for node in nodes:
        styles = [CLASS_STYLES.get(node.class_name or "", "")]
        if LINKED_CLASS in node.classes:
            styles.append(LINKED_STYLE)
        text.append(node.text, style=" ".join(style for style in styles if style))
    if caret is not None:
        plain = text.plain
        if caret >= len(plain) or plain[caret] == "\n":
            text = text[:caret] + Text(" ", style="reverse") + text[caret:]
        else:
            text.stylize("reverse", caret, caret + 1)
    return text


def render_machine(snapshot: VmSnapshot) -> str:
    lines = [f"steps: {snapshot.step_count}"]
    lines.append(f"label: {snapshot.current_label or '-'}")
    lines.append("running" if snapshot.running else "halted")
    lines.append("")
    lines.extend(f"{name} = {value}" for name, value in snapshot.registers.items())
    return "\n".join(lines)


def render_instructions(
    instructions: Sequence[InstructionInfo], current: Optional[str]
) -> Text:
    text = Text()
    for info in instructions:
        marker = ">" if info.label == current else " "
        style = "reverse" if info.label == current else ""
        text.append(f"{marker} {info.label}: {info.kind}\n", style=style)
    return text


@dataclass
class UIState:
    status_text: str = ""
    current_label: Optional[str] = None
    instructions: Tuple[InstructionInfo, ...] = ()


class NormaStudioApp(App[None]):
    """Editor pane on the left, machine state on the right."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#code-view {
		width: 2fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#side {
		width: 1fr;
	}

	#machine-view, #instructions-view {
		border: round $secondary;
		padding: 0 1;
		height: 1fr;
		overflow: auto;
	}

	#status-line {
		height: auto;
		max-height: 8;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#status-line.error {
		color: $error;
	}

	#position-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("f2", "playback('check')", "Check"),
        ("f5", "playback('run')", "Run"),
        ("f6", "playback('step')", "Step"),
        ("f7", "playback('reset')", "Reset"),
        ("f8", "playback('abort')", "Abort"),
        ("f3", "delay(1)", "Slower"),
        ("f4", "delay(-1)", "Faster"),
    ]

    def __init__(self, *, config: Optional[StudioConfig] = None) -> None:
        super().__init__()
        self.config = config or StudioConfig.from_env()
        self._state = UIState()
        self.adapter: TextualStudioAdapter | None = None
        self._nodes: List[RenderNode] = []
        self._code_widget: Static | None = None
        self._machine_widget: Static | None = None
        self._instructions_widget: Static | None = None
        self._status_widget: Static | None = None
        self._position_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal():
            self._code_widget = Static("", id="code-view")
            yield self._code_widget
            with Vertical(id="side"):
                self._machine_widget = Static("", id="machine-view")
                self._instructions_widget = Static("", id="instructions-view")
                yield self._machine_widget
                yield self._instructions_widget
        self._status_widget = Static("", id="status-line")
        self._position_widget = Static("", id="position-line")
        yield self._status_widget
        yield self._position_widget
        yield Footer()

    async def on_mount(self) -> None:
        hooks = StudioUIHooks(
            update_code=self._update_code,
            update_position=self._update_position,
            update_status=self._update_status,
            update_machine=self._update_machine,
            update_instructions=self._update_instructions,
        )
        self.adapter = TextualStudioAdapter(
            JsonFileStorage(self.config.storage_path),
            norma.compile,
            AsyncioScheduler(),
            hooks,
            config=self.config,
        )
        self._redraw_code()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        if self.adapter.handle_textual_key(key, text=text, modifiers=modifiers):
            event.stop()
            event.prevent_default()

    def action_playback(self, name: str) -> None:
        if self.adapter:
            self.adapter.command(PlaybackCommand(name))

    def action_delay(self, direction: int) -> None:
        if self.adapter:
            current = self.adapter.controller.delay_ms
            self.adapter.set_delay(max(0, current + direction * DELAY_STEP_MS))

    def _update_code(self, nodes: List[RenderNode]) -> None:
        self._nodes = nodes
        self._redraw_code()

    def _redraw_code(self) -> None:
        if self._code_widget is None:
            return
        caret = self.adapter.session.buffer.caret if self.adapter else None
        self._code_widget.update(render_nodes(self._nodes, caret))

    def _update_position(self, line: int, column: int) -> None:
        if self._position_widget:
            delay = self.adapter.controller.delay_ms if self.adapter else 0
            self._position_widget.update(f"Ln {line}, Col {column}  |  delay {delay} ms")

    def _update_status(self, status: str, ok: bool) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.set_class(not ok, "error")
            self._status_widget.update(status)

    def _update_machine(self, snapshot: VmSnapshot) -> None:
        self._state.current_label = snapshot.current_label
        if self._machine_widget:
            self._machine_widget.update(render_machine(snapshot))
        self._redraw_instructions()

    def _update_instructions(self, instructions: Sequence[InstructionInfo]) -> None:
        self._state.instructions = tuple(instructions)
        self._redraw_instructions()

    def _redraw_instructions(self) -> None:
        if self._instructions_widget:
            self._instructions_widget.update(
                render_instructions(self._state.instructions, self._state.current_label)
            )

    @staticmethod
    def _normalize_key(
        event: events.Key,
    ) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
        key = event.key
        if key == "ctrl+q" or key.startswith("f") and key[1:].isdigit():
            return None
        parts = key.split("+")
        modifiers = tuple(part for part in parts[:-1] if part in {"ctrl", "shift", "alt"})
        base = parts[-1]
        if event.character and event.is_printable and not modifiers:
            return (event.character, event.character, ())
        return (base, None, modifiers)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    defaults = StudioConfig.from_env()
    parser = argparse.ArgumentParser(description="Edit and step Norma programs.")
    parser.add_argument(
        "--storage",
        default=defaults.storage_path,
        help=f"JSON file holding the code and edit history (default: {defaults.storage_path})",
    )
    parser.add_argument(
        "--input",
        default=defaults.input_value,
        help="Initial value of register X (default: 0)",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=defaults.default_delay_ms,
        help="Wait between visible steps while running; 0 runs in large batches",
    )
    parser.add_argument(
        "--history-limit",
        type=int,
        default=defaults.history_limit,
        help="Maximum number of undo entries kept",
    )
    parser.add_argument(
        "--log-preset",
        default="quiet",
        choices=("quiet", "development", "production", "performance"),
        help="Telemetry preset (default: quiet, the screen owns the terminal)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    defaults = StudioConfig.from_env()
    config = StudioConfig(
        history_limit=args.history_limit,
        default_delay_ms=args.delay_ms,
        run_batch=defaults.run_batch,
        storage_path=args.storage,
        code_key=defaults.code_key,
        history_key=defaults.history_key,
        input_value=args.input,
    )
    NormaStudioApp(config=config).run()


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
