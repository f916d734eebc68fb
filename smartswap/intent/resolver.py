"""
Module: resolver
Purpose: Aggregate signals into a score board and pick the winning category.
Dependencies: smartswap.runtime.thresholds

Stage 2 of the intent pipeline. Deterministic: identical signal lists always
resolve to the same category and confidence.

Bands (top score s, margin m to the runner-up):
    s >= high                     -> high
    s >= medium and m >= margin   -> medium
    s >= low                      -> low, category kept, imprecision note
    otherwise                     -> default, "below threshold" note

The close-contest note (m < close_contest_margin and s >= medium) is
advisory and independent of the bands and of the tie-break.

m is negative when the priority tie-break ranks a lower-scoring category
first; a "Priority tie-break" note records that case.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from types import MappingProxyType

from smartswap.intent.categories import NAMED_CATEGORIES, Category, ConfidenceBand
from smartswap.intent.types import Resolution, ScoreBoard, Signal
from smartswap.observability.logging import get_logger
from smartswap.runtime.thresholds import ResolutionThresholds

logger = get_logger(__name__)

NO_SIGNALS_REASONING = "No personalization signals detected. Showing default experience."


def build_score_board(signals: Sequence[Signal]) -> ScoreBoard:
    """Sum signal weights per named category; unmatched categories are 0."""
    totals = {category: 0.0 for category in NAMED_CATEGORIES}
    for signal in signals:
        if signal.category in totals:
            totals[signal.category] += signal.weight
    return MappingProxyType({category: round(score, 6) for category, score in totals.items()})


class IntentResolver:
    def __init__(self, thresholds: ResolutionThresholds | None = None):
        self.thresholds = thresholds or ResolutionThresholds()
        self._priority = {category: index for index, category in enumerate(self.thresholds.priority_order)}
        missing = [c.value for c in NAMED_CATEGORIES if c not in self._priority]
        if missing:
            raise ValueError(f"priority order is missing entries for: {', '.join(missing)}")

    def rank(self, board: ScoreBoard) -> list[Category]:
        """Order categories by score, using priority inside the tie-break band.

        Adjacent pairs whose scores differ by less than the tie-break margin
        (or by exactly the margin, within float tolerance) are ordered by the
        fixed priority list instead of by raw score.
        """
        ranked = sorted(NAMED_CATEGORIES, key=lambda c: (-board[c], self._priority[c]))
        margin = self.thresholds.tie_break_margin
        swapped = True
        while swapped:
            swapped = False
            for i in range(len(ranked) - 1):
                upper, lower = ranked[i], ranked[i + 1]
                diff = board[upper] - board[lower]
                within_band = diff < margin or math.isclose(diff, margin, abs_tol=1e-9)
                if within_band and self._priority[lower] < self._priority[upper]:
                    ranked[i], ranked[i + 1] = lower, upper
                    swapped = True
        return ranked

    def resolve(self, signals: Sequence[Signal]) -> Resolution:
        if not signals:
            return Resolution.fallback(NO_SIGNALS_REASONING)

        t = self.thresholds
        board = build_score_board(signals)
        ranked = self.rank(board)
        top, runner_up = ranked[0], ranked[1]
        top_score = board[top]
        margin = round(top_score - board[runner_up], 6)
        notes: list[str] = []

        if top_score >= t.medium and margin < t.close_contest_margin:
            notes.append(
                f"Close contest: {top.value} ({top_score:.2f}) vs {runner_up.value} "
                f"({board[runner_up]:.2f})"
            )

        if margin < 0:
            notes.append(
                f"Priority tie-break: {top.value} ranked above higher-scoring {runner_up.value}; "
                f"margin is negative ({margin:.2f})"
            )

        if top_score >= t.high:
            category, confidence = top, ConfidenceBand.HIGH
        elif top_score >= t.medium and margin >= t.medium_margin:
            category, confidence = top, ConfidenceBand.MEDIUM
        elif top_score >= t.low:
            category, confidence = top, ConfidenceBand.LOW
            notes.append(f"Imprecise match: {top.value} resolved with low confidence ({top_score:.2f})")
        else:
            category, confidence = Category.DEFAULT, ConfidenceBand.LOW
            notes.append(f"Top score {top_score:.2f} below threshold {t.low:.2f}; using default")

        dominant = self._dominant_signal(signals, top)
        if category is Category.DEFAULT or dominant is None:
            reasoning = "Intent signals too weak or ambiguous. Defaulting to generic experience."
        else:
            reasoning = f"Detected '{dominant.raw_value}' in {dominant.source}. Score: {top_score:.2f}."

        logger.debug("Resolved %s (%s) top=%.2f margin=%.2f", category.value, confidence.value, top_score, margin)
        return Resolution(
            category=category,
            confidence=confidence,
            score_board=board,
            top_score=top_score,
            margin=margin,
            runner_up=runner_up,
            dominant_signal=dominant,
            reasoning=reasoning,
            notes=tuple(notes),
        )

    @staticmethod
    def _dominant_signal(signals: Sequence[Signal], category: Category) -> Signal | None:
        """Highest-weight signal for category; earliest wins on equal weight."""
        best: Signal | None = None
        for signal in signals:
            if signal.category is category and (best is None or signal.weight > best.weight):
                best = signal
        return best
