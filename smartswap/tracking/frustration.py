"""
Rage-click detection: a per-element sliding window of recent interactions.

Once a key reaches the threshold inside the window it reports friction and
its window is emptied, so the very next interaction cannot re-fire; the key
has to accumulate from zero again.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from smartswap.config import FRUSTRATION_THRESHOLD, FRUSTRATION_WINDOW_MS
from smartswap.tracking.dom import ElementNode

Clock = Callable[[], float]


def wall_clock_ms() -> float:
    return time.time() * 1000


def element_key(element: ElementNode) -> str:
    """Stable identity: id, else data-testid, else TAG-<first 20 chars of text>."""
    if element.id:
        return element.id
    test_id = element.get_attribute("data-testid")
    if test_id:
        return test_id
    return f"{element.tag.upper()}-{element.text[:20].strip()}"


class FrustrationDetector:
    def __init__(
        self,
        threshold: int = FRUSTRATION_THRESHOLD,
        window_ms: float = FRUSTRATION_WINDOW_MS,
        clock: Clock = wall_clock_ms,
    ):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.threshold = threshold
        self.window_ms = window_ms
        self._clock = clock
        self._buffer: dict[str, list[float]] = {}

    def record(self, key: str) -> bool:
        """Record one interaction for key; True when friction is detected."""
        now = self._clock()
        recent = [t for t in self._buffer.get(key, []) if now - t < self.window_ms]
        recent.append(now)
        if len(recent) >= self.threshold:
            self._buffer[key] = []
            return True
        self._buffer[key] = recent
        return False

    def clear(self) -> None:
        self._buffer.clear()

    @property
    def size(self) -> int:
        """Number of element keys currently tracked."""
        return len(self._buffer)
