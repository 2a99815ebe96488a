"""Logging bootstrap for redis-gli.

// [LAW:single-enforcer] Handlers on the redis_gli logger are attached here only.

The log file is a single rotating ``redis-gli.log`` under
``$REDIS_GLI_LOG_DIR`` (or ``REDIS_GLI_LOG_FILE`` verbatim). stderr carries the
same records except while the TUI owns the terminal.
"""

from __future__ import annotations

import contextlib
import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "redis-gli.log"


@dataclass(frozen=True)
class LoggingRuntime:
    level: int
    file_path: str
    stderr_handler: logging.Handler

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    @contextlib.contextmanager
    def stderr_muted(self):
        """Drop stderr output for the duration, e.g. while the TUI runs."""
        self.stderr_handler.setLevel(logging.CRITICAL + 1)
        try:
            yield
        finally:
            self.stderr_handler.setLevel(self.level)


_RUNTIME: LoggingRuntime | None = None


def _level_from_env() -> int:
    level = logging.getLevelName(os.environ.get("REDIS_GLI_LOG_LEVEL", "INFO").strip().upper())
    # getLevelName returns "Level X" for unknown names.
    return level if isinstance(level, int) else logging.INFO


def _log_file_path() -> Path:
    explicit = os.environ.get("REDIS_GLI_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = os.environ.get("REDIS_GLI_LOG_DIR") or os.path.expanduser(
        "~/.local/share/redis-gli/logs"
    )
    return Path(log_dir) / LOG_FILE_NAME


def configure() -> LoggingRuntime:
    """Attach stderr and rotating-file handlers to the redis_gli logger, once."""
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level = _level_from_env()
    file_path = _log_file_path()
    file_path.parent.mkdir(parents=True, exist_ok=True)

    stderr_handler = logging.StreamHandler()
    stderr_handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    file_handler = RotatingFileHandler(
        file_path, maxBytes=5 * 1024 * 1024, backupCount=2, encoding="utf-8"
    )
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    logger = logging.getLogger("redis_gli")
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    for handler in (stderr_handler, file_handler):
        handler.setLevel(level)
        logger.addHandler(handler)

    _RUNTIME = LoggingRuntime(level=level, file_path=str(file_path), stderr_handler=stderr_handler)
    return _RUNTIME
