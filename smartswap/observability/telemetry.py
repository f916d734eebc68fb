"""
In-process telemetry for the personalization and tracking pipelines.

Nothing leaves the process. Counters and latency samples (milliseconds) stay
in memory so tests and GET /debug/stats can read them back.

    counter("ledger.batches_flushed")
    with time_block("intent.personalize.latency"):   # stored as ..._latency_ms
        ...
    get_latency_stats("intent.personalize.latency")  # count/min/max/avg/p50/p95/p99
"""

from __future__ import annotations

import contextlib
import time
from collections.abc import Iterator, Sequence

from smartswap.observability.logging import get_logger

logger = get_logger("smartswap.telemetry")

_COUNTERS: dict[str, int] = {}
_LATENCIES_MS: dict[str, list[float]] = {}

_EMPTY_STATS: dict[str, float] = {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0, "p99": 0.0}


def _metric_key(metric_name: str) -> str:
    """Map "x.latency" onto "x.latency_ms" so both spellings share one series."""
    if metric_name.endswith(".latency"):
        return f"{metric_name}_ms"
    return metric_name


def _percentile(sorted_samples: Sequence[float], fraction: float) -> float:
    index = min(int(len(sorted_samples) * fraction), len(sorted_samples) - 1)
    return sorted_samples[index]


def counter(name: str, increment: int = 1) -> int:
    """Add to a named counter and return its new value."""
    value = _COUNTERS.get(name, 0) + increment
    _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def get_counters() -> dict[str, int]:
    """Snapshot of all counters."""
    return dict(_COUNTERS)


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """Record the block's wall time in milliseconds, even when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        key = _metric_key(metric_name)
        logger.debug("timing=%s ms=%.3f", key, elapsed_ms)
        _LATENCIES_MS.setdefault(key, []).append(elapsed_ms)


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """count, min, max, avg, p50, p95 and p99 in milliseconds; zeros when unrecorded."""
    samples = _LATENCIES_MS.get(_metric_key(metric_name))
    if not samples:
        return dict(_EMPTY_STATS)

    ordered = sorted(samples)
    return {
        "count": len(ordered),
        "min": ordered[0],
        "max": ordered[-1],
        "avg": sum(ordered) / len(ordered),
        "p50": _percentile(ordered, 0.50),
        "p95": _percentile(ordered, 0.95),
        "p99": _percentile(ordered, 0.99),
    }


def reset_latencies() -> None:
    _LATENCIES_MS.clear()


def reset_counters() -> None:
    _COUNTERS.clear()
