"""Output sink: the status/error/success feed.

Many producers (UI thread, worker threads), one consumer (the drain loop in
RedisGliApp). Messages are immutable and stamped when created, i.e. at enqueue.

// [LAW:one-source-of-truth] Every feed message is also logged here, so the
//   log file mirrors what the user saw.
"""

import logging
import queue
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class Severity(Enum):
    INFO = "info"
    PROCESSING = "processing"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# [LAW:dataflow-not-control-flow] Severity → display colour and log level.
SEVERITY_STYLES: dict[Severity, str] = {
    Severity.INFO: "default",
    Severity.PROCESSING: "dark_orange",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}

SEVERITY_LOG_LEVELS: dict[Severity, int] = {
    Severity.INFO: logging.INFO,
    Severity.PROCESSING: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class OutputMessage:
    severity: Severity
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc).astimezone())

    @property
    def style(self) -> str:
        return SEVERITY_STYLES[self.severity]

    def format(self) -> str:
        return "[{}] {}".format(self.created_at.isoformat(timespec="seconds"), self.text)


class OutputSink:
    """Thread-safe FIFO of OutputMessage. Never drops under normal operation."""

    def __init__(self):
        self._queue: queue.Queue[OutputMessage] = queue.Queue()

    def emit(self, message: OutputMessage) -> OutputMessage:
        logger.log(SEVERITY_LOG_LEVELS[message.severity], "%s", message.text)
        self._queue.put(message)
        return message

    def info(self, text: str) -> OutputMessage:
        return self.emit(OutputMessage(Severity.INFO, text))

    def processing(self, text: str) -> OutputMessage:
        return self.emit(OutputMessage(Severity.PROCESSING, text))

    def success(self, text: str) -> OutputMessage:
        return self.emit(OutputMessage(Severity.SUCCESS, text))

    def warning(self, text: str) -> OutputMessage:
        return self.emit(OutputMessage(Severity.WARNING, text))

    def error(self, text: str) -> OutputMessage:
        return self.emit(OutputMessage(Severity.ERROR, text))

    def get(self, timeout: float | None = None) -> OutputMessage:
        """Block for the next message. Raises queue.Empty on timeout."""
        return self._queue.get(timeout=timeout)

    def drain(self) -> list[OutputMessage]:
        """Pop every pending message without blocking, in enqueue order."""
        pending = []
        while True:
            try:
                pending.append(self._queue.get_nowait())
            except queue.Empty:
                return pending

    def pending(self) -> int:
        return self._queue.qsize()
