"""Tests for the injectable seams: scheduler, page lifecycle, capture, sinks, stores."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest

from smartswap.observability.structured import StructuredLogger
from smartswap.tracking.capture import DelegatedCapture
from smartswap.tracking.dom import ElementNode, RawInteraction
from smartswap.tracking.ledger import EventLedger, LedgerConfig
from smartswap.tracking.scheduling import AsyncioScheduler, PageEvent, PageLifecycle
from smartswap.tracking.sinks import StructuredLogSink
from smartswap.tracking.storage import JsonFileStore


class TestAsyncioScheduler:
    def test_call_later_and_idle_fire_on_loop(self):
        fired = []

        async def run():
            scheduler = AsyncioScheduler()
            scheduler.call_later(1, lambda: fired.append("timer"))
            scheduler.call_when_idle(lambda: fired.append("idle"), 5)
            await asyncio.sleep(0.05)

        asyncio.run(run())
        assert fired == ["timer", "idle"]

    def test_cancelled_handle_never_fires(self):
        fired = []

        async def run():
            handle = AsyncioScheduler().call_later(1, lambda: fired.append("timer"))
            handle.cancel()
            await asyncio.sleep(0.02)

        asyncio.run(run())
        assert fired == []


class TestPageLifecycle:
    def test_subscribe_emit_unsubscribe(self):
        lifecycle = PageLifecycle()
        calls = []
        unsubscribe = lifecycle.subscribe(PageEvent.BEFORE_UNLOAD, lambda: calls.append(1))
        lifecycle.emit(PageEvent.BEFORE_UNLOAD)
        lifecycle.emit(PageEvent.VISIBILITY_HIDDEN)
        unsubscribe()
        unsubscribe()
        lifecycle.emit(PageEvent.BEFORE_UNLOAD)
        assert calls == [1]
        assert lifecycle.subscriber_count(PageEvent.BEFORE_UNLOAD) == 0


class TestDelegatedCapture:
    def test_dispatch_reaches_attached_handler_only(self):
        capture = DelegatedCapture()
        seen = []
        detach = capture.attach(seen.append)
        interaction = RawInteraction(target=ElementNode(tag="button", text="Buy"))
        capture.dispatch(interaction)
        detach()
        capture.dispatch(interaction)
        assert seen == [interaction]
        assert capture.handler_count == 0


class TestStructuredLogSink:
    def test_batch_is_logged_as_flush_event(self, caplog, clock, make_record):
        caplog.set_level(logging.INFO, logger="smartswap.structured")
        sink = StructuredLogSink(StructuredLogger(run_id="test", sample_rate_info=1.0))
        ledger = EventLedger(LedgerConfig(batch_size=1, enable_persistence=False), sink=sink, clock=clock)
        ledger.push(make_record())

        events = [json.loads(r.getMessage()) for r in caplog.records if r.name == "smartswap.structured"]
        flushes = [e for e in events if e["run"] == "test"]
        assert flushes[0]["event"] == "ledger_batch_flushed"
        assert flushes[0]["event_count"] == 1


class TestJsonFileStore:
    def test_set_get_remove(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "store.json")
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        store.remove("k")
        assert store.get("k") is None

    def test_non_object_file_raises(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            JsonFileStore(path).get("k")
