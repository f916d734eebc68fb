"""
Delivery sinks: where the ledger hands a flushed Batch.

Delivery is fire-and-forget. A sink may raise; the ledger logs and counts
the failure and never retries.
"""

from __future__ import annotations

from collections.abc import Callable

from smartswap.observability.logging import get_logger
from smartswap.observability.structured import StructuredLogger, get_structured_logger
from smartswap.tracking.models import Batch

logger = get_logger(__name__)

Sink = Callable[[Batch], None]


def log_sink(batch: Batch) -> None:
    """Default sink: one INFO line per batch."""
    logger.info(
        "Flushed batch %s: %d events (trigger: %s)",
        batch.id,
        batch.event_count,
        batch.trigger.value,
    )


class StructuredLogSink:
    """Emit each batch as a ledger_batch_flushed structured event."""

    def __init__(self, slog: StructuredLogger | None = None):
        self._slog = slog

    def __call__(self, batch: Batch) -> None:
        slog = self._slog or get_structured_logger()
        slog.batch_flushed(batch.session_id, batch.id, batch.trigger.value, batch.event_count)


class CollectingSink:
    """Keeps every delivered batch in memory (debug panels, tests)."""

    def __init__(self) -> None:
        self.batches: list[Batch] = []

    def __call__(self, batch: Batch) -> None:
        self.batches.append(batch)
