"""Blocking notice dialog. Dismissed with OK, Enter or Escape."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Grid
from textual.screen import ModalScreen
from textual.widgets import Button, Label


class NoticeScreen(ModalScreen[None]):
    """Modal message that must be acknowledged before input continues."""

    DEFAULT_CSS = """
    NoticeScreen {
        align: center middle;
    }

    #notice-dialog {
        grid-size: 1;
        grid-rows: auto auto;
        grid-gutter: 1;
        padding: 1 2;
        width: 60;
        height: auto;
        border: thick $warning;
        background: $surface;
    }

    #notice-message {
        width: 100%;
        content-align: center middle;
    }

    #notice-ok {
        width: 100%;
    }
    """

    BINDINGS = [Binding("escape", "dismiss_notice", "OK", show=False)]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Grid(id="notice-dialog"):
            yield Label(self.message, id="notice-message")
            yield Button("OK", variant="primary", id="notice-ok")

    def on_mount(self) -> None:
        self.query_one("#notice-ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(None)

    def action_dismiss_notice(self) -> None:
        self.dismiss(None)
