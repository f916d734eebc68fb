"""
Pytest configuration for SmartSwap tests

Provides a controllable clock, a hand-driven scheduler and a record factory
shared across the unit and integration suites.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from itertools import count

import pytest

from smartswap.observability.telemetry import reset_counters, reset_latencies
from smartswap.tracking.models import EventRecord, SmartEventType

START_MS = 1_700_000_000_000.0


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: float = START_MS):
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeHandle:
    def __init__(self, scheduler: FakeScheduler, kind: str, delay_ms: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.kind = kind
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Records scheduled callbacks; tests fire them explicitly."""

    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self, "timer", delay_ms, callback)
        self.handles.append(handle)
        return handle

    def call_when_idle(self, callback: Callable[[], None], timeout_ms: float) -> FakeHandle:
        handle = FakeHandle(self, "idle", timeout_ms, callback)
        self.handles.append(handle)
        return handle

    def pending(self, kind: str | None = None) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and (kind is None or h.kind == kind)]

    def fire(self, kind: str) -> None:
        """Run (and retire) every pending handle of one kind."""
        due = self.pending(kind)
        for handle in due:
            handle.cancelled = True
        for handle in due:
            handle.callback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def make_record() -> Callable[..., EventRecord]:
    """Factory for EventRecords with unique ids unless one is given."""
    ids = count(1)

    def _make(
        event_id: str | None = None,
        session_id: str = "pv_test_session",
        event_type: SmartEventType = SmartEventType.CTA_CLICK,
        **overrides,
    ) -> EventRecord:
        fields = {
            "id": event_id or f"evt_test_{next(ids)}",
            "type": event_type,
            "variant_id": "gaming",
            "cumulative_session_score": 0.1,
            "path": "/collections/gaming",
            "timestamp": datetime(2026, 1, 15, 12, 0, tzinfo=UTC),
            "session_id": session_id,
        }
        fields.update(overrides)
        return EventRecord(**fields)

    return _make


@pytest.fixture(autouse=True)
def _reset_telemetry():
    reset_counters()
    reset_latencies()
    yield
