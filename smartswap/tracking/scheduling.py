"""
Scheduling seams for the listener and the ledger.

Everything runs on one cooperative event loop. Timers, the idle callback and
page-lifecycle hooks are all injected so tests can drive them by hand.

    Scheduler.call_later(delay_ms, cb)         -> Handle   interval timer
    Scheduler.call_when_idle(cb, timeout_ms)   -> Handle   low-priority work
    PageLifecycle.subscribe(event, cb)         -> unsubscribe callable
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from smartswap.observability.logging import get_logger

logger = get_logger(__name__)


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle: ...

    def call_when_idle(self, callback: Callable[[], None], timeout_ms: float) -> Handle: ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    asyncio has no idle notification, so call_when_idle runs the callback at
    its deadline (timeout_ms), the latest point an idle callback may fire.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000, callback)

    def call_when_idle(self, callback: Callable[[], None], timeout_ms: float) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, timeout_ms) / 1000, callback)


class PageEvent(str, Enum):
    VISIBILITY_HIDDEN = "visibility_hidden"
    BEFORE_UNLOAD = "beforeunload"


class PageLifecycle:
    """Fan-out of page/session transitions to subscribers."""

    def __init__(self) -> None:
        self._subscribers: dict[PageEvent, list[Callable[[], None]]] = {event: [] for event in PageEvent}

    def subscribe(self, event: PageEvent, callback: Callable[[], None]) -> Callable[[], None]:
        self._subscribers[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[event]:
                self._subscribers[event].remove(callback)

        return unsubscribe

    def emit(self, event: PageEvent) -> None:
        for callback in list(self._subscribers[event]):
            callback()

    def subscriber_count(self, event: PageEvent) -> int:
        return len(self._subscribers[event])
