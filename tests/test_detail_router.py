"""Tests for key selection: per-type panels, focus entries, errors.

Runs the full path: worker fetch → DetailViewRouter.apply on the UI thread.
"""

import pytest

import redis_gli.tui.detail_views as dv
from redis_gli.store.protocol import StoreError
from redis_gli.tui import key_bindings as kb
from redis_gli.tui.output_sink import Severity
from tests.harness import (
    FakeStoreClient,
    focused_action,
    output_by_severity,
    press_and_settle,
    press_sequence,
    ring_actions,
    run_app,
    wait_for_startup,
    wait_until,
)


@pytest.fixture
def client():
    c = FakeStoreClient()
    c.put_string("a", "hello")
    c.put_list("b", ["x", "y", "z"])
    c.put_set("s", {"m2", "m1"})
    c.put_zset("z", {"low": 1.0, "high": 2.5}, ttl=90)
    c.put_hash("h", {"f1": "v1", "f2": "v2"})
    c.put("q", "stream", None)
    return c


async def _select(pilot, app, key, view_type):
    app.select_key(key)
    assert await wait_until(
        pilot, lambda: isinstance(app.router.view, view_type) and _shows(app, key)
    )
    await pilot.pause()


def _shows(app, key):
    return app.query_one("#meta-panel").meta_text.startswith(f"KeyID: {key}\n")


def _detail_actions(app):
    return ring_actions(app)[3:]


class TestScenario:
    async def test_scalar_then_list(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)

            await _select(pilot, app, "a", dv.ScalarDetail)
            assert app.query_one("#detail-value").value_text == "hello"
            meta = app.query_one("#meta-panel").meta_text
            assert "Type: string" in meta
            assert meta == "KeyID: a\nType: string, TTL: no expiry"
            assert _detail_actions(app) == [kb.KEY_STRING_VALUE]

            await _select(pilot, app, "b", dv.ListDetail)
            assert app.query_one("#detail-list").rows == ["  1 | x", "  2 | y", "  3 | z"]
            # Scalar entry gone, exactly one list entry.
            assert _detail_actions(app) == [kb.KEY_LIST_VALUE]
            assert not app.query("#detail-value")

    async def test_success_message_summarizes_key(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "z", dv.RankedDetail)
            assert await wait_until(
                pilot,
                lambda: "query z OK, type=zset, ttl=1m30s"
                in output_by_severity(app, Severity.SUCCESS),
            )

    async def test_selecting_from_key_list(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await press_and_settle(pilot, "f3")
            await press_and_settle(pilot, "enter")
            assert await wait_until(pilot, lambda: isinstance(app.router.view, dv.ScalarDetail))
            assert _shows(app, "a")


class TestPanels:
    async def test_set_renders_like_list(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "s", dv.ListDetail)
            assert app.query_one("#detail-list").rows == ["  1 | m1", "  2 | m2"]

    async def test_zset_rows_carry_scores(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "z", dv.RankedDetail)
            view = app.query_one("#detail-list")
            assert view.rows == ["  1 | low", "  2 | high"]
            assert view.secondary_rows == ["    Score: 1", "    Score: 2.5"]
            assert _detail_actions(app) == [kb.KEY_LIST_VALUE]

    async def test_hash_registers_two_entries(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "h", dv.HashDetail)
            assert app.query_one("#hash-fields").rows == ["  1 | f1", "  2 | f2"]
            assert app.query_one("#hash-value").value_text == ""
            assert _detail_actions(app) == [kb.KEY_HASH, kb.KEY_STRING_VALUE]
            assert not client.called("hash_field_get")

    async def test_hash_field_is_fetched_lazily(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "h", dv.HashDetail)

            await press_and_settle(pilot, "f8")
            assert focused_action(app) == kb.KEY_HASH
            await press_sequence(pilot, ["down", "enter"])

            value = app.query_one("#hash-value")
            assert await wait_until(pilot, lambda: value.value_text == "v2")
            assert value.border_title == " Value: f2 "
            assert client.called("hash_field_get") == [("hash_field_get", "h", "f2")]

    async def test_stale_hash_field_is_ignored(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "h", dv.HashDetail)
            assert app.router.show_hash_field("other", "f1", "nope") is False
            assert app.router.show_hash_field("h", "f1", "v1") is True
            assert app.query_one("#hash-value").value_text == "v1"

            await _select(pilot, app, "a", dv.ScalarDetail)
            assert app.router.show_hash_field("h", "f1", "v1") is False

    async def test_hash_field_error_keeps_pane(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "h", dv.HashDetail)
            client.failures["hash_field_get"] = StoreError("LOADING")
            await press_and_settle(pilot, "f8", "enter")
            assert await wait_until(
                pilot, lambda: "errors: LOADING" in output_by_severity(app, Severity.ERROR)
            )
            assert app.query_one("#hash-value").value_text == ""

    async def test_value_key_focuses_detail_panel(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "b", dv.ListDetail)
            await press_and_settle(pilot, "ctrl+y")
            assert app.focused is app.query_one("#detail-list")
            await press_and_settle(pilot, "tab")
            assert focused_action(app) == kb.SEARCH


class TestFailures:
    async def test_fetch_error_keeps_previous_panel(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "b", dv.ListDetail)

            client.failures["get"] = StoreError("READONLY")
            app.select_key("a")
            assert await wait_until(
                pilot, lambda: "errors: READONLY" in output_by_severity(app, Severity.ERROR)
            )
            await pilot.pause()
            assert isinstance(app.router.view, dv.ListDetail)
            assert app.query_one("#detail-list").rows == ["  1 | x", "  2 | y", "  3 | z"]
            assert _detail_actions(app) == [kb.KEY_LIST_VALUE]
            assert _shows(app, "b")

    async def test_unsupported_type_warns_and_keeps_panel(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            await _select(pilot, app, "a", dv.ScalarDetail)

            app.select_key("q")
            assert await wait_until(
                pilot,
                lambda: "unsupported type stream for key q"
                in output_by_severity(app, Severity.WARNING),
            )
            assert isinstance(app.router.view, dv.ScalarDetail)
            assert app.query_one("#detail-value").value_text == "hello"
            assert _shows(app, "a")

    async def test_repeated_switching_leaves_no_stale_entries(self, client):
        async with run_app(client=client) as (pilot, app):
            assert await wait_for_startup(pilot, app)
            for key, view_type in [
                ("a", dv.ScalarDetail),
                ("h", dv.HashDetail),
                ("b", dv.ListDetail),
                ("a", dv.ScalarDetail),
                ("z", dv.RankedDetail),
            ]:
                await _select(pilot, app, key, view_type)
                assert len(app.router.entries) == len(_detail_actions(app))
                assert ring_actions(app)[:3] == [kb.SEARCH, kb.KEYS, kb.OUTPUT]
            assert _detail_actions(app) == [kb.KEY_LIST_VALUE]
