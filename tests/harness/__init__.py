"""Textual in-process test harness for redis-gli.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, wait_until, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.assertions import (
    focused_action,
    output_by_severity,
    output_messages,
    output_texts,
    ring_actions,
)
from tests.harness.fake_store import FakeStoreClient
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    wait_for_startup,
    wait_until,
)

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "wait_until",
    "wait_for_startup",
    "output_messages",
    "output_texts",
    "output_by_severity",
    "ring_actions",
    "focused_action",
    "FakeStoreClient",
]
