"""Detail view router: key selection to center-panel composition.

Two halves, split by thread:
    inspect(key)       worker thread, store calls only, returns a KeyInspection
    apply(inspection)  UI thread, swaps widgets and FocusRing entries

// [LAW:dataflow-not-control-flow] RENDERERS maps each DetailView variant to one
//   render function; apply() never branches on key type.
// [LAW:single-enforcer] Only this module adds or removes detail FocusRing entries.
"""

import logging
from collections.abc import Callable

from textual.widget import Widget
from textual.widgets import Static

import redis_gli.tui.detail_views as dv
from redis_gli.store.protocol import StoreClient
from redis_gli.tui import key_bindings as kb
from redis_gli.tui.focus_ring import FocusEntry, FocusRing
from redis_gli.tui.key_bindings import KeyBindingRegistry
from redis_gli.tui.output_sink import OutputSink
from redis_gli.tui.widgets import (
    WELCOME_TEXT,
    HashFieldsView,
    RowItem,
    ScalarView,
    ValueListView,
    panel_title,
)

logger = logging.getLogger(__name__)

# (widget, action it is reachable by, or None when not focusable)
Rendered = list[tuple[Widget, str | None]]


def _render_none(view: dv.NoDetail, bindings: KeyBindingRegistry) -> Rendered:
    return [(Static(WELCOME_TEXT, id="welcome"), None)]


def _render_scalar(view: dv.ScalarDetail, bindings: KeyBindingRegistry) -> Rendered:
    widget = ScalarView(
        view.value,
        title=panel_title("Value", bindings, kb.KEY_STRING_VALUE),
        id="detail-value",
    )
    return [(widget, kb.KEY_STRING_VALUE)]


def _render_list(view: dv.ListDetail, bindings: KeyBindingRegistry) -> Rendered:
    rows = [RowItem(dv.row_format(i, item), payload=item) for i, item in enumerate(view.items)]
    widget = ValueListView(*rows, id="detail-list")
    widget.border_title = panel_title("Values", bindings, kb.KEY_LIST_VALUE)
    return [(widget, kb.KEY_LIST_VALUE)]


def _render_ranked(view: dv.RankedDetail, bindings: KeyBindingRegistry) -> Rendered:
    rows = [
        RowItem(
            dv.row_format(i, m.member),
            secondary=dv.score_format(m.score),
            payload=m.member,
        )
        for i, m in enumerate(view.members)
    ]
    widget = ValueListView(*rows, id="detail-list")
    widget.border_title = panel_title("Members", bindings, kb.KEY_LIST_VALUE)
    return [(widget, kb.KEY_LIST_VALUE)]


def _render_hash(view: dv.HashDetail, bindings: KeyBindingRegistry) -> Rendered:
    rows = [RowItem(dv.row_format(i, f), payload=f) for i, f in enumerate(view.fields)]
    fields = HashFieldsView(view.key, *rows, id="hash-fields")
    fields.border_title = panel_title("Fields", bindings, kb.KEY_HASH)
    value = ScalarView(
        title=panel_title("Value", bindings, kb.KEY_STRING_VALUE),
        id="hash-value",
    )
    return [(fields, kb.KEY_HASH), (value, kb.KEY_STRING_VALUE)]


RENDERERS: dict[type, Callable[..., Rendered]] = {
    dv.NoDetail: _render_none,
    dv.ScalarDetail: _render_scalar,
    dv.ListDetail: _render_list,
    dv.RankedDetail: _render_ranked,
    dv.HashDetail: _render_hash,
}


class DetailViewRouter:
    """Owns the detail container's children and their FocusRing entries.

    Args:
        container: Widget whose children are the current detail panels.
        ring: The application's FocusRing.
        sink: Output feed for success/warning messages.
        client: Store used by inspect().
        bindings: Source of panel titles.
        on_meta: Receives the metadata text after each successful apply.
    """

    def __init__(
        self,
        container: Widget,
        ring: FocusRing,
        sink: OutputSink,
        client: StoreClient,
        bindings: KeyBindingRegistry,
        on_meta: Callable[[str], None],
    ):
        self._container = container
        self._ring = ring
        self._sink = sink
        self._client = client
        self._bindings = bindings
        self._on_meta = on_meta
        self._view: dv.DetailView = dv.NoDetail()
        self._entries: list[FocusEntry] = []
        self._focus_enabled = True

    @property
    def view(self) -> dv.DetailView:
        return self._view

    @property
    def entries(self) -> tuple[FocusEntry, ...]:
        return tuple(self._entries)

    @property
    def focus_enabled(self) -> bool:
        return self._focus_enabled

    @focus_enabled.setter
    def focus_enabled(self, enabled: bool) -> None:
        """Detach detail entries from the ring (False) or re-attach them (True)."""
        if enabled == self._focus_enabled:
            return
        self._focus_enabled = enabled
        if enabled:
            for entry in self._entries:
                self._ring.append(entry)
        else:
            self._detach()

    def _detach(self) -> None:
        owned = {id(entry.handle) for entry in self._entries}
        self._ring.remove_where(lambda entry: id(entry.handle) in owned)

    def inspect(self, key: str) -> dv.KeyInspection:
        """Blocking fetch. Call from a worker thread; StoreError propagates."""
        return dv.inspect_key(self._client, key)

    async def apply(self, inspection: dv.KeyInspection) -> bool:
        """Swap the center panel to inspection's view. Returns False if unsupported."""
        view = inspection.view
        if view is None:
            self._sink.warning(f"unsupported type {inspection.key_type} for key {inspection.key}")
            return False

        await self._show(view)
        self._sink.success(inspection.summary)
        self._on_meta(inspection.meta_text)
        return True

    async def _show(self, view: dv.DetailView) -> None:
        self._detach()
        self._entries = []
        await self._container.remove_children()

        rendered = RENDERERS[type(view)](view, self._bindings)
        await self._container.mount_all([widget for widget, _ in rendered])

        self._view = view
        self._entries = [
            FocusEntry(widget, action) for widget, action in rendered if action is not None
        ]
        if self._focus_enabled:
            for entry in self._entries:
                self._ring.append(entry)
        logger.debug("detail view %s, %d focus entries", type(view).__name__, len(self._entries))

    def show_hash_field(self, key: str, field: str, value: str) -> bool:
        """Repaint the hash value pane, only if key's hash view is still shown."""
        view = self._view
        if not isinstance(view, dv.HashDetail) or view.key != key:
            logger.debug("stale hash field %s/%s ignored", key, field)
            return False
        pane = self._container.query_one("#hash-value", ScalarView)
        pane.set_value(value, title=f" Value: {field} ")
        return True
