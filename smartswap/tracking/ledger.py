"""
Event Ledger: dedup, batching, best-effort persistence, multi-trigger flush.

Lifecycle:
    ledger = EventLedger(storage=store, sink=log_sink, scheduler=sched, lifecycle=page)
        -> restores any persisted snapshot (corrupt data ignored)
    ledger.start()
        -> arms interval timer, idle flush, page-transition hooks
    ledger.push(record)
        -> dedup within window, queue, persist last 50, auto-flush at batch size
    ledger.destroy()
        -> one final "manual" flush, then every timer and hook torn down once

Single-writer: push/flush assume one event loop. Guard the queue and the
dedup index with a lock before sharing a ledger across threads.
"""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from smartswap.config import (
    LEDGER_BATCH_HISTORY,
    LEDGER_BATCH_SIZE,
    LEDGER_DEDUP_WINDOW_MS,
    LEDGER_ENABLE_PERSISTENCE,
    LEDGER_FLUSH_INTERVAL_MS,
    LEDGER_IDLE_TIMEOUT_MS,
    LEDGER_PERSIST_CAP,
    LEDGER_STORAGE_KEY,
)
from smartswap.observability.logging import get_logger
from smartswap.observability.structured import EventType, get_structured_logger
from smartswap.observability.telemetry import counter
from smartswap.tracking.frustration import Clock, wall_clock_ms
from smartswap.tracking.models import Batch, DedupStats, EventRecord, FlushTrigger, LedgerStats, generate_id
from smartswap.tracking.scheduling import Handle, PageEvent, PageLifecycle, Scheduler
from smartswap.tracking.sinks import Sink, log_sink
from smartswap.tracking.storage import InMemoryStore, KeyValueStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerConfig:
    batch_size: int = LEDGER_BATCH_SIZE
    flush_interval_ms: int = LEDGER_FLUSH_INTERVAL_MS  # 0 disables the interval timer
    idle_timeout_ms: int = LEDGER_IDLE_TIMEOUT_MS
    dedup_window_ms: int = LEDGER_DEDUP_WINDOW_MS
    storage_key: str = LEDGER_STORAGE_KEY
    persist_cap: int = LEDGER_PERSIST_CAP
    batch_history: int = LEDGER_BATCH_HISTORY
    enable_persistence: bool = LEDGER_ENABLE_PERSISTENCE

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.dedup_window_ms < 0:
            raise ValueError("dedup_window_ms must not be negative")


def to_storage_row(record: EventRecord) -> dict[str, Any]:
    """Backend row shape for an events table with a JSON metadata column."""
    return {
        "event_type": record.type.value,
        "variant_id": record.variant_id,
        "session_score": record.cumulative_session_score,
        "path_url": record.path,
        "is_friction_event": record.is_friction,
        "session_id": record.session_id,
        "metadata": {
            "semantic_score": record.semantic_score.model_dump(mode="json"),
            "element_descriptor": (
                record.element_descriptor.model_dump(mode="json") if record.element_descriptor else None
            ),
            "middleware_data": record.middleware_data,
        },
        "created_at": record.timestamp.isoformat(),
    }


class EventLedger:
    def __init__(
        self,
        config: LedgerConfig | None = None,
        storage: KeyValueStore | None = None,
        sink: Sink | None = log_sink,
        scheduler: Scheduler | None = None,
        lifecycle: PageLifecycle | None = None,
        clock: Clock = wall_clock_ms,
        on_flush: Callable[[Batch], None] | None = None,
    ):
        self.config = config or LedgerConfig()
        self._storage = storage if storage is not None else InMemoryStore()
        self._sink = sink
        self._scheduler = scheduler
        self._lifecycle = lifecycle
        self._clock = clock
        self._on_flush = on_flush

        self._queue: list[EventRecord] = []
        self._seen: dict[str, float] = {}  # event id -> accepted at (ms)
        self._batches: deque[Batch] = deque(maxlen=self.config.batch_history)

        self._received = 0
        self._flushed = 0
        self._batches_sent = 0
        self._duplicates = 0
        self._last_flush_at: datetime | None = None
        self._last_flush_trigger: FlushTrigger | None = None

        self._started = False
        self._destroyed = False
        self._interval_handle: Handle | None = None
        self._idle_handle: Handle | None = None
        self._unsubscribers: list[Callable[[], None]] = []

        if self.config.enable_persistence:
            self._restore()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Arm interval, idle and page-transition flush triggers. Idempotent."""
        if self._started or self._destroyed:
            return
        self._started = True
        if self._scheduler is not None:
            if self.config.flush_interval_ms > 0:
                self._arm_interval()
            self._arm_idle()
        if self._lifecycle is not None:
            for event in (PageEvent.VISIBILITY_HIDDEN, PageEvent.BEFORE_UNLOAD):
                self._unsubscribers.append(
                    self._lifecycle.subscribe(event, self._on_page_transition)
                )

    def destroy(self) -> None:
        """Final manual flush, then tear everything down. Safe to call repeatedly."""
        if self._destroyed:
            return
        self._destroyed = True
        self.flush(FlushTrigger.MANUAL)

        for handle in (self._interval_handle, self._idle_handle):
            if handle is not None:
                handle.cancel()
        self._interval_handle = None
        self._idle_handle = None
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

        get_structured_logger().log_event(EventType.LEDGER_DESTROYED, batches=self._batches_sent)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    # ------------------------------------------------------------------
    # Push / flush
    # ------------------------------------------------------------------

    def push(self, record: EventRecord) -> bool:
        """Queue a record. False if the ledger is destroyed or the id is a recent duplicate."""
        if self._destroyed:
            return False

        now = self._clock()
        self._received += 1

        accepted_at = self._seen.get(record.id)
        if accepted_at is not None and now - accepted_at < self.config.dedup_window_ms:
            self._duplicates += 1
            counter("ledger.duplicates_dropped")
            get_structured_logger().log_event(
                EventType.LEDGER_DUPLICATE_DROPPED, session_id=record.session_id, event_id=record.id
            )
            return False

        self._seen[record.id] = now
        self._queue.append(record)
        counter("ledger.events_accepted")

        if self.config.enable_persistence:
            self._persist()

        if len(self._queue) >= self.config.batch_size:
            self.flush(FlushTrigger.BATCH_FULL)
        return True

    def flush(self, trigger: FlushTrigger = FlushTrigger.MANUAL) -> Batch | None:
        """Emit the queue as one Batch; None when the queue is empty."""
        if not self._queue:
            return None

        now = self._clock()
        events = tuple(self._queue)
        batch = Batch(
            id=generate_id("batch", now),
            session_id=events[0].session_id or "unknown",
            events=events,
            flushed_at=datetime.fromtimestamp(now / 1000, UTC),
            trigger=trigger,
            event_count=len(events),
            dedup_stats=DedupStats(
                total_received=self._received,
                duplicates_dropped=self._duplicates,
                unique_dispatched=self._received - self._duplicates,
            ),
        )

        self._flushed += len(events)
        self._batches_sent += 1
        self._last_flush_at = batch.flushed_at
        self._last_flush_trigger = trigger

        self._queue = []
        if self.config.enable_persistence:
            self._clear_storage()
        self._prune_dedup_index(now)
        self._batches.append(batch)

        counter("ledger.batches_flushed")
        counter(f"ledger.trigger.{trigger.value}")
        get_structured_logger().batch_flushed(batch.session_id, batch.id, trigger.value, batch.event_count)

        self._dispatch(batch)
        return batch

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def stats(self) -> LedgerStats:
        return LedgerStats(
            total_events_received=self._received,
            total_events_flushed=self._flushed,
            total_batches_sent=self._batches_sent,
            total_duplicates_dropped=self._duplicates,
            queue_size=len(self._queue),
            last_flush_at=self._last_flush_at,
            last_flush_trigger=self._last_flush_trigger,
        )

    @property
    def current_queue(self) -> list[EventRecord]:
        return list(self._queue)

    @property
    def recent_batches(self) -> list[Batch]:
        return list(self._batches)

    @property
    def tracked_ids(self) -> frozenset[str]:
        """Event ids still held in the dedup index."""
        return frozenset(self._seen)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def _arm_interval(self) -> None:
        self._interval_handle = self._scheduler.call_later(self.config.flush_interval_ms, self._on_interval)

    def _on_interval(self) -> None:
        if self._destroyed:
            return
        self.flush(FlushTrigger.INTERVAL)
        self._arm_interval()

    def _arm_idle(self) -> None:
        self._idle_handle = self._scheduler.call_when_idle(self._on_idle, self.config.idle_timeout_ms)

    def _on_idle(self) -> None:
        if self._destroyed:
            return
        self.flush(FlushTrigger.IDLE)
        self._arm_idle()

    def _on_page_transition(self) -> None:
        if not self._destroyed:
            self.flush(FlushTrigger.PAGE_TRANSITION)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _dispatch(self, batch: Batch) -> None:
        slog = get_structured_logger()
        if self._on_flush is not None:
            try:
                self._on_flush(batch)
            except Exception as e:
                logger.warning("on_flush callback failed for %s: %s", batch.id, e)
                counter("ledger.callback_errors")
                slog.log_event(EventType.LEDGER_CALLBACK_ERROR, batch=batch.id, error=type(e).__name__)
        if self._sink is not None:
            try:
                self._sink(batch)
                slog.log_event(EventType.DELIVERY_OK, batch=batch.id, event_count=batch.event_count)
            except Exception as e:
                logger.warning("Delivery failed for %s: %s", batch.id, e)
                counter("ledger.delivery_errors")
                slog.log_event(EventType.DELIVERY_ERROR, batch=batch.id, error=type(e).__name__)

    def _prune_dedup_index(self, now: float) -> None:
        cutoff = now - self.config.dedup_window_ms * 2
        self._seen = {event_id: ts for event_id, ts in self._seen.items() if ts >= cutoff}

    def _persist(self) -> None:
        snapshot = [r.model_dump(mode="json") for r in self._queue[-self.config.persist_cap :]]
        try:
            self._storage.set(self.config.storage_key, json.dumps(snapshot))
        except Exception as e:
            logger.debug("Ledger persist failed, continuing memory-only: %s", e)
            counter("ledger.persist_errors")
            get_structured_logger().log_event(EventType.LEDGER_PERSIST_ERROR, error=type(e).__name__)

    def _clear_storage(self) -> None:
        try:
            self._storage.remove(self.config.storage_key)
        except Exception as e:
            logger.debug("Ledger storage clear failed: %s", e)
            counter("ledger.persist_errors")

    def _restore(self) -> None:
        slog = get_structured_logger()
        try:
            raw = self._storage.get(self.config.storage_key)
            if not raw:
                return
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("persisted ledger snapshot is not a list")
            restored = [EventRecord.model_validate(item) for item in data[-self.config.persist_cap :]]
        except Exception as e:
            logger.info("Ignoring unreadable ledger snapshot: %s", e)
            counter("ledger.restore_errors")
            slog.log_event(EventType.LEDGER_RESTORE_ERROR, error=type(e).__name__)
            return
        self._queue = restored
        slog.log_event(EventType.LEDGER_RESTORE_OK, restored=len(restored))
        logger.debug("Restored %d queued events", len(restored))
