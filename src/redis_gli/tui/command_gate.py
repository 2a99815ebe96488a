"""Command gate: single-flight execution of ad-hoc store commands.

State machine: IDLE → RUNNING(command) → IDLE
Submissions while RUNNING are rejected with a notice, never queued.

State is owned by the UI thread: submit() runs there, and completion is
marshalled back before the gate returns to IDLE.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from redis_gli.store.protocol import StoreError
from redis_gli.tui.output_sink import OutputSink

logger = logging.getLogger(__name__)

BUSY_NOTICE = "Other command is processing, please wait..."


class CommandPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class CommandState:
    phase: CommandPhase
    command: str | None = None


IDLE = CommandState(CommandPhase.IDLE)


class CommandGate:
    """Serializes command execution against the store.

    Args:
        execute: Blocking call that runs the command text and returns display text.
        sink: Where processing/success/error messages go.
        run_in_background: Starts a zero-arg callable off the UI thread.
        marshal: Runs fn(*args) on the UI thread, in call order.
        on_busy: Shows the blocking notice for a rejected submission.
        on_result: Receives the formatted result on success.
    """

    def __init__(
        self,
        execute: Callable[[str], str],
        sink: OutputSink,
        run_in_background: Callable[[Callable[[], None]], object],
        marshal: Callable[..., object],
        on_busy: Callable[[], None],
        on_result: Callable[[str], None] | None = None,
    ):
        self._execute = execute
        self._sink = sink
        self._run_in_background = run_in_background
        self._marshal = marshal
        self._on_busy = on_busy
        self._on_result = on_result
        self._state = IDLE

    @property
    def state(self) -> CommandState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state.phase is CommandPhase.RUNNING

    def submit(self, command_text: str) -> bool:
        """Start command_text if idle. Returns True when execution started."""
        text = command_text.strip()
        if not text:
            return False
        if self.is_running:
            logger.info("rejected %r while %r is running", text, self._state.command)
            self._on_busy()
            return False

        self._state = CommandState(CommandPhase.RUNNING, text)
        self._sink.processing(f"Command {text} is processing...")
        self._run_in_background(lambda: self._execute_in_background(text))
        return True

    def _execute_in_background(self, text: str) -> None:
        try:
            result = self._execute(text)
        except Exception as e:
            self._marshal(self._finish, text, None, e)
            if not isinstance(e, StoreError):
                raise
            return
        self._marshal(self._finish, text, result, None)

    def _finish(self, text: str, result: str | None, error: Exception | None) -> None:
        self._state = IDLE
        if error is not None:
            self._sink.error(f"errors: {error}")
            return
        if self._on_result is not None:
            self._on_result(result)
        self._sink.success(f"Command {text} succeed")
