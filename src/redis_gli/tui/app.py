"""Main TUI application using Textual.

// [LAW:single-enforcer] on_key is the sole global key dispatcher.
// [LAW:one-way-deps] Store calls happen only in worker threads; their results
//   reach widgets through call_from_thread or post_message, never directly.
// [LAW:one-source-of-truth] command_mode decides which center panel is shown.
"""

import functools
import logging
import queue
import traceback

from textual import events
from textual.app import App, ComposeResult, SystemCommand
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Input
from textual.worker import Worker, WorkerState, get_current_worker

import redis_gli.store.keyspace
import redis_gli.tui.widgets
from redis_gli.io.settings import Config
from redis_gli.store.protocol import StoreClient, StoreError, validate_store_client
from redis_gli.tui import key_bindings as kb
from redis_gli.tui.command_gate import BUSY_NOTICE, CommandGate
from redis_gli.tui.detail_router import DetailViewRouter
from redis_gli.tui.focus_ring import FocusEntry, FocusRing
from redis_gli.tui.key_bindings import KeyBindingRegistry
from redis_gli.tui.notice import NoticeScreen
from redis_gli.tui.output_sink import OutputMessage, OutputSink

logger = logging.getLogger(__name__)

# Registry actions handled by the app itself, mapped to Textual action names.
GLOBAL_ACTIONS: dict[str, str] = {
    kb.SWITCH_FOCUS: "switch_focus",
    kb.QUIT: "quit",
    kb.COMMAND: "toggle_command_mode",
}

COMMAND_ACTIONS = frozenset({kb.COMMAND_FOCUS, kb.COMMAND_RESULT})


class _OutputEvent(Message, bubble=False):
    """Thread-safe bridge: drain thread → app message pump."""

    def __init__(self, output: OutputMessage) -> None:
        self.output = output
        super().__init__()


class RedisGliApp(App):
    """Terminal browser for a Redis-compatible store."""

    CSS_PATH = "styles.css"
    TITLE = "redis-gli"

    def __init__(
        self,
        client: StoreClient,
        config: Config,
        bindings: KeyBindingRegistry | None = None,
        sink: OutputSink | None = None,
    ):
        super().__init__()
        validate_store_client(client)
        self._client = client
        self._config = config
        self._key_registry = bindings or KeyBindingRegistry.with_overrides(config.key_bindings)
        self._sink = sink or OutputSink()
        self._ring = FocusRing()
        self._router: DetailViewRouter | None = None
        self.command_mode = False
        self._stop_drain = False

        # Buffered error log, dumped to stderr after TUI exits
        self._error_log: list[str] = []

        self._gate = CommandGate(
            execute=client.execute,
            sink=self._sink,
            run_in_background=self._run_command,
            marshal=self.call_from_thread,
            on_busy=self._show_busy_notice,
            on_result=self._show_command_result,
        )

    # ─── Accessors ─────────────────────────────────────────────────────

    @property
    def config(self) -> Config:
        return self._config

    @property
    def bindings(self) -> KeyBindingRegistry:
        return self._key_registry

    @property
    def sink(self) -> OutputSink:
        return self._sink

    @property
    def ring(self) -> FocusRing:
        return self._ring

    @property
    def router(self) -> DetailViewRouter | None:
        return self._router

    @property
    def gate(self) -> CommandGate:
        return self._gate

    @property
    def error_log(self) -> list[str]:
        return list(self._error_log)

    def _get_search(self):
        return self.query_one("#search-input", redis_gli.tui.widgets.SearchInput)

    def _get_key_list(self):
        return self.query_one("#key-list", redis_gli.tui.widgets.KeyListPanel)

    def _get_summary(self):
        return self.query_one("#summary", redis_gli.tui.widgets.SummaryPanel)

    def _get_help(self):
        return self.query_one("#help-panel", redis_gli.tui.widgets.HelpPanel)

    def _get_meta(self):
        return self.query_one("#meta-panel", redis_gli.tui.widgets.MetaPanel)

    def _get_detail(self):
        return self.query_one("#detail-panel", redis_gli.tui.widgets.DetailPanel)

    def _get_command(self):
        return self.query_one("#command-panel", redis_gli.tui.widgets.CommandPanel)

    def _get_output(self):
        return self.query_one("#output-panel", redis_gli.tui.widgets.OutputPanel)

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def get_system_commands(self, screen):
        yield from super().get_system_commands(screen)
        yield SystemCommand(
            "Command panel", "Toggle the ad-hoc command panel", self.action_toggle_command_mode
        )
        yield SystemCommand("Refresh status", "Re-fetch server status", self.refresh_status)
        yield SystemCommand("Reload keys", "Scan all keys again", self.action_reload_keys)

    def compose(self) -> ComposeResult:
        widgets = redis_gli.tui.widgets
        with Horizontal(id="layout"):
            with Vertical(id="left-panel"):
                yield widgets.SearchInput(self._key_registry, id="search-input")
                yield widgets.KeyListPanel(self._key_registry, id="key-list")
                yield widgets.SummaryPanel(id="summary")
            with Vertical(id="right-panel"):
                yield widgets.HelpPanel(
                    self._key_registry,
                    self._config.version,
                    self._config.short_commit,
                    id="help-panel",
                )
                yield widgets.MetaPanel(id="meta-panel")
                with Vertical(id="center"):
                    yield widgets.DetailPanel(id="detail-panel")
                    yield widgets.CommandPanel(self._key_registry, id="command-panel")
                yield widgets.OutputPanel(
                    self._key_registry,
                    max_lines=self._config.output_max_lines,
                    id="output-panel",
                )

    def on_mount(self):
        self._router = DetailViewRouter(
            container=self._get_detail(),
            ring=self._ring,
            sink=self._sink,
            client=self._client,
            bindings=self._key_registry,
            on_meta=self._get_meta().set_meta,
        )
        self._get_command().display = False

        # Base ring order: search, keys, output. Detail entries follow.
        self._ring.append(FocusEntry(self._get_search(), kb.SEARCH))
        self._ring.append(FocusEntry(self._get_key_list(), kb.KEYS))
        self._ring.append(FocusEntry(self._get_output(), kb.OUTPUT))
        self.set_focus(self._get_search())

        self.run_worker(self._drain_output, thread=True, exclusive=False, name="output-drain")
        self.run_worker(
            self._load_initial,
            thread=True,
            group="keys",
            exit_on_error=False,
            name="initial-load",
        )
        self.set_interval(self._config.status_refresh_seconds, self.refresh_status)
        logger.info("redis-gli started against %s:%s", self._config.host, self._config.port)

    def on_unmount(self):
        self._stop_drain = True
        logger.info("redis-gli TUI shutting down")

    def _handle_exception(self, error: Exception) -> None:
        """// [LAW:single-enforcer] Top-level exception handler - keeps the browser running.

        Logs unhandled exceptions with a normal Python traceback and reports
        them in the output feed. Does NOT call super(), which would exit.
        """
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))

        # Buffer for post-exit dump
        self._error_log.append(f"EXCEPTION: {error}")
        self._error_log.append(tb)

        logger.error("Unhandled exception: %s\n%s", error, tb)
        self._sink.error(f"errors: {type(error).__name__}: {error}")

    # ─── Background work ───────────────────────────────────────────────

    def _drain_output(self):
        """Bridge thread: sink.get → post_message into Textual's message pump.

        A single consumer, so feed order is enqueue order.
        """
        worker = get_current_worker()
        while not self._stop_drain and not worker.is_cancelled:
            try:
                output = self._sink.get(timeout=0.1)
            except queue.Empty:
                continue
            self.post_message(_OutputEvent(output))

    def on__output_event(self, message: _OutputEvent):
        self._get_output().append_message(message.output)

    def _fetch_status(self):
        try:
            text = self._client.server_status_text()
        except StoreError as e:
            self._sink.error(f"errors: {e}")
            return
        self.call_from_thread(self._get_help().set_server_info, text)

    def _load_initial(self):
        self._fetch_status()
        try:
            keys = redis_gli.store.keyspace.list_keys(
                self._client, "*", self._config.max_key_limit
            )
        except StoreError as e:
            self._sink.error(f"errors: {e}")
            return
        self.call_from_thread(self._show_keys, keys, True)

    def _search_keys(self, pattern: str):
        try:
            keys = redis_gli.store.keyspace.list_keys(
                self._client, pattern, self._config.max_key_limit
            )
        except StoreError as e:
            self._sink.error(f"errors: {e}")
            return
        if get_current_worker().is_cancelled:
            return
        self.call_from_thread(self._show_keys, keys, False)

    def _inspect_key(self, key: str):
        try:
            inspection = self._router.inspect(key)
        except StoreError as e:
            self._sink.error(f"errors: {e}")
            return
        if get_current_worker().is_cancelled:
            return
        self.call_from_thread(self._router.apply, inspection)

    def _fetch_hash_field(self, key: str, field: str):
        try:
            value = self._client.hash_field_get(key, field)
        except StoreError as e:
            self._sink.error(f"errors: {e}")
            return
        if get_current_worker().is_cancelled:
            return
        self.call_from_thread(self._router.show_hash_field, key, field, value)

    def _run_command(self, fn) -> Worker:
        return self.run_worker(
            fn, thread=True, group="command", exit_on_error=False, name="command"
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state != WorkerState.ERROR:
            return
        worker = event.worker
        self._error_log.append(f"[worker {worker.name}] {worker.error}")
        logger.error("worker %s failed: %r", worker.name, worker.error)
        # Command failures are already reported by the gate.
        if worker.group != "command":
            self._sink.error(f"errors: {worker.error}")

    # ─── UI-thread updates ─────────────────────────────────────────────

    async def _show_keys(self, keys: list[str], focus_list: bool) -> None:
        key_list = self._get_key_list()
        await key_list.set_keys(keys)
        self._get_summary().set_total(len(keys))
        if focus_list:
            self.focus_action(kb.KEYS)

    def _show_command_result(self, text: str) -> None:
        self._get_command().result_view.set_value(text)

    def _show_busy_notice(self) -> None:
        self.push_screen(NoticeScreen(BUSY_NOTICE), callback=self._after_notice)

    def _after_notice(self, _result) -> None:
        if self.command_mode:
            self.set_focus(self._get_command().command_input)

    # ─── Public operations ─────────────────────────────────────────────

    def refresh_status(self) -> None:
        self.run_worker(
            self._fetch_status,
            thread=True,
            group="status",
            exclusive=True,
            exit_on_error=False,
            name="status",
        )

    def search(self, pattern: str) -> None:
        self.run_worker(
            functools.partial(self._search_keys, pattern.strip()),
            thread=True,
            group="keys",
            exclusive=True,
            exit_on_error=False,
            name=f"search {pattern}",
        )

    def select_key(self, key: str) -> None:
        self.run_worker(
            functools.partial(self._inspect_key, key),
            thread=True,
            group="inspect",
            exclusive=True,
            exit_on_error=False,
            name=f"inspect {key}",
        )

    def submit_command(self, text: str) -> bool:
        return self._gate.submit(text)

    def focus_action(self, action: str) -> bool:
        """Focus the ring entry reachable by action. False if none is registered."""
        entry = self._ring.focus_by_action(action)
        if entry is None:
            return False
        self.set_focus(entry.handle)
        return True

    # ─── Actions ───────────────────────────────────────────────────────

    def action_switch_focus(self) -> None:
        entry = self._ring.advance()
        if entry is not None:
            self.set_focus(entry.handle)

    def action_toggle_command_mode(self) -> None:
        command = self._get_command()
        detail = self._get_detail()
        self.command_mode = not self.command_mode

        if self.command_mode:
            self._router.focus_enabled = False
            self._ring.append(FocusEntry(command.command_input, kb.COMMAND_FOCUS))
            self._ring.append(FocusEntry(command.result_view, kb.COMMAND_RESULT))
            detail.display = False
            command.display = True
            self.focus_action(kb.COMMAND_FOCUS)
        else:
            self._ring.remove_where(lambda entry: entry.action in COMMAND_ACTIONS)
            self._router.focus_enabled = True
            command.display = False
            detail.display = True
            self._ring.reset()
            self.set_focus(self._ring.current.handle)
        logger.debug("command mode %s", "on" if self.command_mode else "off")

    def action_reload_keys(self) -> None:
        self.search("*")

    # ─── Messages ──────────────────────────────────────────────────────

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search-input":
            self.search(event.value)
        elif event.input.id == "command-input":
            if self._gate.submit(event.value):
                event.input.value = ""

    def on_key_list_panel_key_selected(self, message) -> None:
        self.select_key(message.key)

    def on_hash_fields_view_field_selected(self, message) -> None:
        self.run_worker(
            functools.partial(self._fetch_hash_field, message.key, message.field),
            thread=True,
            group="hash-field",
            exclusive=True,
            exit_on_error=False,
            name=f"hget {message.key} {message.field}",
        )

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        # Focus moved by mouse or by Textual itself: keep the ring cursor in step.
        self._ring.sync_to(event.widget)

    # ─── Key dispatch ──────────────────────────────────────────────────

    async def on_event(self, event: events.Event) -> None:
        # Raw keys only; the same event comes back here after bubbling.
        if self._config.debug and isinstance(event, events.Key) and not event.is_forwarded:
            self._sink.info(f"Key {event.key} pressed")
        await super().on_event(event)

    async def on_key(self, event: events.Key) -> None:
        """// [LAW:single-enforcer] on_key is the sole key dispatcher.

        Global actions (switch focus, quit, command panel) always consume the
        key. Panel actions consume it only when their panel is in the ring;
        otherwise the key falls through to Textual's default handling.
        """
        if isinstance(self.screen, ModalScreen):
            return

        action = self._key_registry.resolve(event.key)
        if action is None:
            return

        app_action = GLOBAL_ACTIONS.get(action)
        if app_action is not None:
            event.prevent_default()
            await self.run_action(app_action)
            return

        if self.focus_action(action):
            event.prevent_default()
