"""Modal prompt for the work comment required to stop a timer."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static


class StopDialog(ModalScreen[str]):
    """Asks for a work comment. Dismisses with the comment, or "" on cancel."""

    DEFAULT_CSS = """
    StopDialog {
        align: center middle;
    }
    #stop-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }
    #stop-status {
        height: auto;
        color: $error;
    }
    .btn-row {
        height: 3;
        margin-top: 1;
        align: center middle;
    }
    .btn-row Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, subject_label: str) -> None:
        super().__init__()
        self._subject_label = subject_label

    def compose(self) -> ComposeResult:
        with Vertical(id="stop-dialog"):
            yield Label(f'Work completed on "{self._subject_label}"')
            yield Input(placeholder="Work comment...", id="stop-comment")
            yield Static("", id="stop-status")
            with Horizontal(classes="btn-row"):
                yield Button("Stop Timer", variant="error", id="stop-submit")
                yield Button("Cancel", variant="default", id="stop-cancel")

    def on_mount(self) -> None:
        self.query_one("#stop-comment", Input).focus()

    def _submit(self) -> None:
        comment = self.query_one("#stop-comment", Input).value.strip()
        if not comment:
            self.query_one("#stop-status", Static).update("Please enter a work comment")
            return
        self.dismiss(comment)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "stop-submit":
            self._submit()
        else:
            self.dismiss("")

    def action_cancel(self) -> None:
        self.dismiss("")
