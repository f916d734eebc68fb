"""
Module: types
Purpose: Shared domain types for the intent engine.
Dependencies: smartswap.intent.categories (enums only)

Leaf module: collector, resolver, composer and engine all import from here,
so it must not import any of them back.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import NamedTuple

from smartswap.intent.categories import NAMED_CATEGORIES, Category, ConfidenceBand

ScoreBoard = Mapping[Category, float]


def zero_score_board() -> ScoreBoard:
    return MappingProxyType({category: 0.0 for category in NAMED_CATEGORIES})


# ---------------------------------------------------------------------------
# Collector output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Signal:
    """A weighted observation tying one piece of visit context to a category."""

    source: str  # e.g. "utm_campaign", "search_query", "param:color"
    raw_value: str
    category: Category
    weight: float

    def __post_init__(self) -> None:
        clamped = min(1.0, max(0.0, float(self.weight)))
        object.__setattr__(self, "weight", round(clamped, 6))


class CollectedSignals(NamedTuple):
    signals: list[Signal]
    edge_case_notes: list[str]


# ---------------------------------------------------------------------------
# Resolver output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Resolution:
    """Winning category plus everything needed to explain it."""

    category: Category
    confidence: ConfidenceBand
    score_board: ScoreBoard
    top_score: float = 0.0
    margin: float = 0.0  # top score minus runner-up score; negative after a priority tie-break
    runner_up: Category | None = None
    dominant_signal: Signal | None = None
    reasoning: str = ""
    notes: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def fallback(cls, reasoning: str, notes: tuple[str, ...] = ()) -> Resolution:
        """Default category, low confidence, all-zero board."""
        return cls(
            category=Category.DEFAULT,
            confidence=ConfidenceBand.LOW,
            score_board=zero_score_board(),
            reasoning=reasoning,
            notes=notes,
        )
