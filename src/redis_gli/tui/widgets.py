"""Custom widgets for the TUI interface.

Panels own rendering only. Store access and focus bookkeeping live in
RedisGliApp and DetailViewRouter.
"""

from collections import deque

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Input, Label, ListItem, ListView, Static

import redis_gli.tui.detail_views
from redis_gli.tui import key_bindings as kb
from redis_gli.tui.key_bindings import KeyBindingRegistry
from redis_gli.tui.output_sink import OutputMessage

WELCOME_TEXT = "Select a key to inspect its value."


def panel_title(name: str, bindings: KeyBindingRegistry, action: str) -> str:
    return f" {name} ({bindings.display_label(action)}) "


class RowItem(ListItem):
    """One list row: primary text, optional secondary line, optional payload."""

    def __init__(self, text: str, secondary: str | None = None, payload=None):
        labels = [Label(Text(text), classes="row-primary")]
        if secondary is not None:
            labels.append(Label(Text(secondary), classes="row-secondary"))
        super().__init__(*labels)
        self.row_text = text
        self.secondary_text = secondary
        self.payload = payload


class RowListView(ListView):
    """ListView whose rows are RowItems."""

    def _row_items(self) -> list[RowItem]:
        return [child for child in self.children if isinstance(child, RowItem)]

    @property
    def rows(self) -> list[str]:
        return [item.row_text for item in self._row_items()]

    @property
    def secondary_rows(self) -> list[str | None]:
        return [item.secondary_text for item in self._row_items()]


class ScalarView(Static, can_focus=True):
    """Read-only text surface for a single value."""

    def __init__(self, value: str = "", title: str = " Value ", **kwargs):
        super().__init__("", **kwargs)
        self.value_text = ""
        self.border_title = title
        self.set_value(value)

    def set_value(self, value: str, title: str | None = None) -> None:
        self.value_text = value
        # Text, not markup: stored values may contain [brackets].
        self.update(Text(f" {value}") if value else Text(""))
        if title is not None:
            self.border_title = title


class ValueListView(RowListView):
    """Rows of a list, set or sorted set."""


class HashFieldsView(RowListView):
    """Navigable hash field names. Selecting one asks for that field's value."""

    class FieldSelected(Message):
        """Posted when a hash field row is chosen."""

        def __init__(self, key: str, field: str) -> None:
            self.key = key
            self.field = field
            super().__init__()

    def __init__(self, key: str, *items, **kwargs):
        super().__init__(*items, **kwargs)
        self.hash_key = key

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        item = event.item
        if isinstance(item, RowItem) and item.payload is not None:
            self.post_message(self.FieldSelected(self.hash_key, item.payload))


class KeyListPanel(RowListView):
    """Keys matched by the last scan or search."""

    class KeySelected(Message):
        """Posted when a key row is chosen."""

        def __init__(self, key: str) -> None:
            self.key = key
            super().__init__()

    def __init__(self, bindings: KeyBindingRegistry, **kwargs):
        super().__init__(**kwargs)
        self.border_title = panel_title("Keys", bindings, kb.KEYS)

    @property
    def keys(self) -> list[str]:
        return [item.payload for item in self._row_items()]

    async def set_keys(self, keys: list[str]) -> None:
        await self.clear()
        if keys:
            await self.extend(
                RowItem(redis_gli.tui.detail_views.row_format(i, k), payload=k)
                for i, k in enumerate(keys)
            )
            self.index = 0

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        item = event.item
        if isinstance(item, RowItem) and item.payload is not None:
            self.post_message(self.KeySelected(item.payload))


class SearchInput(Input):
    """Key pattern input. Empty or * scans, anything else matches by pattern."""

    def __init__(self, bindings: KeyBindingRegistry, **kwargs):
        super().__init__(placeholder="*", **kwargs)
        self.border_title = panel_title("Search", bindings, kb.SEARCH)


class SummaryPanel(Static):
    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self.border_title = " Info "
        self.total: int | None = None

    def set_total(self, total: int) -> None:
        self.total = total
        self.update(f" Total matched: {total}")


class MetaPanel(Static):
    """Key metadata summary for the current inspection."""

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self.border_title = " Meta "
        self.meta_text = ""

    def set_meta(self, text: str) -> None:
        self.meta_text = text
        self.update(Text(text, justify="center"))


class HelpPanel(Vertical):
    """Version banner, live server status and key hints."""

    def __init__(self, bindings: KeyBindingRegistry, version: str, commit: str, **kwargs):
        super().__init__(**kwargs)
        self.border_title = f" Version: {version} ({commit}) "
        self._help_text = bindings.help_text()
        self.server_info_text = ""

    def compose(self) -> ComposeResult:
        yield Static("", id="server-info")
        yield Static(Text(self._help_text), id="help-message")

    def set_server_info(self, text: str) -> None:
        self.server_info_text = text
        self.query_one("#server-info", Static).update(Text(text))


class DetailPanel(Horizontal):
    """Center container for the type-specific value views."""

    def compose(self) -> ComposeResult:
        yield Static(WELCOME_TEXT, id="welcome")


class CommandPanel(Vertical):
    """Ad-hoc command input plus the last command's result."""

    def __init__(self, bindings: KeyBindingRegistry, **kwargs):
        super().__init__(**kwargs)
        self.command_input = Input(placeholder="Command", id="command-input")
        self.command_input.border_title = panel_title("Commands", bindings, kb.COMMAND_FOCUS)
        self.result_view = ScalarView(
            title=panel_title("Results", bindings, kb.COMMAND_RESULT), id="command-result"
        )

    def compose(self) -> ComposeResult:
        yield self.command_input
        yield self.result_view


class OutputPanel(ListView):
    """Append-only feed of OutputMessages, oldest evicted past max_lines."""

    def __init__(self, bindings: KeyBindingRegistry, max_lines: int = 1000, **kwargs):
        super().__init__(**kwargs)
        self.border_title = panel_title("Output", bindings, kb.OUTPUT)
        self.max_lines = max_lines
        self._entries: deque[tuple[OutputMessage, ListItem]] = deque()

    @property
    def messages(self) -> list[OutputMessage]:
        return [message for message, _ in self._entries]

    def append_message(self, message: OutputMessage) -> None:
        item = ListItem(Label(Text(message.format(), style=message.style)))
        self._entries.append((message, item))
        self.append(item)
        while len(self._entries) > self.max_lines:
            _, oldest = self._entries.popleft()
            oldest.remove()
        # The feed never shows a selection cursor.
        self.index = None
