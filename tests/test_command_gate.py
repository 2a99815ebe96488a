"""Tests for CommandGate single-flight execution."""

import threading

import pytest

from redis_gli.store.protocol import StoreError
from redis_gli.tui.command_gate import CommandGate, CommandPhase
from redis_gli.tui.output_sink import OutputSink, Severity


class GateFixture:
    """Gate with deferred background execution and inline marshalling."""

    def __init__(self, execute=None):
        self.sink = OutputSink()
        self.pending = []
        self.executed = []
        self.results = []
        self.busy_notices = 0
        self._execute = execute or (lambda text: f"reply to {text}")
        self.gate = CommandGate(
            execute=self.execute,
            sink=self.sink,
            run_in_background=self.pending.append,
            marshal=lambda fn, *args: fn(*args),
            on_busy=self.on_busy,
            on_result=self.results.append,
        )

    def execute(self, text):
        self.executed.append(text)
        return self._execute(text)

    def on_busy(self):
        self.busy_notices += 1

    def run_pending(self):
        while self.pending:
            self.pending.pop(0)()

    def feed(self):
        return [(m.severity, m.text) for m in self.sink.drain()]


def test_ping_runs_then_returns_to_idle():
    f = GateFixture()
    assert f.gate.submit("PING") is True
    assert f.gate.state.phase is CommandPhase.RUNNING
    assert f.gate.state.command == "PING"

    f.run_pending()

    assert f.gate.state.phase is CommandPhase.IDLE
    assert f.results == ["reply to PING"]
    assert f.feed() == [
        (Severity.PROCESSING, "Command PING is processing..."),
        (Severity.SUCCESS, "Command PING succeed"),
    ]


def test_second_submission_while_running_is_rejected_not_queued():
    f = GateFixture()
    f.gate.submit("A")
    assert f.gate.submit("B") is False
    assert f.busy_notices == 1

    f.run_pending()
    f.run_pending()

    assert f.executed == ["A"]
    texts = [text for _, text in f.feed()]
    assert texts == ["Command A is processing...", "Command A succeed"]


def test_submission_after_completion_is_accepted():
    f = GateFixture()
    f.gate.submit("A")
    f.run_pending()
    assert f.gate.submit("B") is True
    f.run_pending()
    assert f.executed == ["A", "B"]
    assert f.busy_notices == 0


def test_store_error_reports_and_returns_to_idle():
    def fail(text):
        raise StoreError("ERR unknown command 'NOPE'")

    f = GateFixture(execute=fail)
    f.gate.submit("NOPE")
    f.run_pending()

    assert not f.gate.is_running
    assert f.results == []
    assert f.feed() == [
        (Severity.PROCESSING, "Command NOPE is processing..."),
        (Severity.ERROR, "errors: ERR unknown command 'NOPE'"),
    ]


def test_unexpected_error_reports_then_propagates():
    def boom(text):
        raise RuntimeError("boom")

    f = GateFixture(execute=boom)
    f.gate.submit("X")
    with pytest.raises(RuntimeError):
        f.run_pending()
    assert not f.gate.is_running
    assert f.feed()[-1] == (Severity.ERROR, "errors: boom")


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_blank_submission_is_ignored(text):
    f = GateFixture()
    assert f.gate.submit(text) is False
    assert f.pending == []
    assert f.busy_notices == 0
    assert f.feed() == []


def test_submission_is_stripped():
    f = GateFixture()
    f.gate.submit("  PING  ")
    f.run_pending()
    assert f.executed == ["PING"]


def test_threaded_execution_never_overlaps():
    """Real threads: while one command blocks, every other submission bounces."""
    sink = OutputSink()
    release = threading.Event()
    started = threading.Event()
    done = threading.Event()
    executed = []
    lock = threading.Lock()

    def execute(text):
        executed.append(text)
        started.set()
        release.wait(timeout=5)
        return "ok"

    def marshal(fn, *args):
        with lock:
            fn(*args)
        done.set()

    busy = []
    gate = CommandGate(
        execute=execute,
        sink=sink,
        run_in_background=lambda fn: threading.Thread(target=fn).start(),
        marshal=marshal,
        on_busy=lambda: busy.append(1),
    )

    assert gate.submit("A")
    assert started.wait(timeout=5)
    with lock:
        for text in ("B", "C", "D"):
            assert gate.submit(text) is False
    release.set()
    assert done.wait(timeout=5)

    assert executed == ["A"]
    assert len(busy) == 3
    assert not gate.is_running
    assert [m.severity for m in sink.drain()] == [Severity.PROCESSING, Severity.SUCCESS]
