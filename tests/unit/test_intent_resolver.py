"""
Tests for intent resolution: score board, ranking, confidence bands.
"""

from __future__ import annotations

import pytest

from smartswap.intent.categories import NAMED_CATEGORIES, Category, ConfidenceBand
from smartswap.intent.resolver import NO_SIGNALS_REASONING, IntentResolver, build_score_board
from smartswap.intent.types import Signal
from smartswap.runtime.thresholds import ResolutionThresholds


def sig(category: Category, weight: float, source: str = "test", raw: str = "value") -> Signal:
    return Signal(source=source, raw_value=raw, category=category, weight=weight)


@pytest.fixture
def resolver():
    return IntentResolver()


class TestScoreBoard:
    def test_board_sums_weights_per_category(self):
        signals = [
            sig(Category.GAMING, 0.4),
            sig(Category.GAMING, 0.3),
            sig(Category.BUDGET, 0.56),
        ]
        board = build_score_board(signals)
        assert board[Category.GAMING] == pytest.approx(0.7)
        assert board[Category.BUDGET] == pytest.approx(0.56)
        assert set(board) == set(NAMED_CATEGORIES)
        assert board[Category.STUDENT] == 0.0

    def test_default_signals_are_not_aggregated(self):
        board = build_score_board([sig(Category.DEFAULT, 0.9)])
        assert Category.DEFAULT not in board
        assert all(score == 0.0 for score in board.values())

    def test_board_is_read_only(self):
        board = build_score_board([sig(Category.GAMING, 0.5)])
        with pytest.raises(TypeError):
            board[Category.GAMING] = 1.0  # type: ignore[index]


class TestEmptyInput:
    def test_empty_signals_resolve_to_default(self, resolver):
        result = resolver.resolve([])
        assert result.category == Category.DEFAULT
        assert result.confidence == ConfidenceBand.LOW
        assert all(score == 0.0 for score in result.score_board.values())
        assert result.reasoning == NO_SIGNALS_REASONING
        assert result.dominant_signal is None


class TestConfidenceBands:
    def test_single_strong_signal_is_high(self, resolver):
        result = resolver.resolve([sig(Category.GAMING, 0.95)])
        assert result.category == Category.GAMING
        assert result.confidence == ConfidenceBand.HIGH
        assert result.score_board[Category.GAMING] == pytest.approx(0.95)
        assert all(result.score_board[c] == 0.0 for c in NAMED_CATEGORIES if c != Category.GAMING)

    def test_medium_needs_margin(self, resolver):
        result = resolver.resolve([sig(Category.PRODUCTIVITY, 0.75)])
        assert result.category == Category.PRODUCTIVITY
        assert result.confidence == ConfidenceBand.MEDIUM
        assert result.notes == ()

    def test_margin_exactly_medium_margin_is_medium(self, resolver):
        result = resolver.resolve([sig(Category.BUDGET, 0.7), sig(Category.GAMING, 0.6)])
        assert result.category == Category.BUDGET
        assert result.margin == pytest.approx(0.1)
        assert result.confidence == ConfidenceBand.MEDIUM

    def test_low_band_keeps_category_with_imprecision_note(self, resolver):
        result = resolver.resolve([sig(Category.CREATIVE, 0.35)])
        assert result.category == Category.CREATIVE
        assert result.confidence == ConfidenceBand.LOW
        assert any("Imprecise" in n for n in result.notes)

    def test_below_low_threshold_falls_back_to_default(self, resolver):
        result = resolver.resolve([sig(Category.GAMING, 0.2)])
        assert result.category == Category.DEFAULT
        assert result.confidence == ConfidenceBand.LOW
        assert any("below threshold" in n for n in result.notes)
        # The board still reflects the evidence
        assert result.score_board[Category.GAMING] == pytest.approx(0.2)


class TestTieBreak:
    def test_close_scores_use_priority_and_note_close_contest(self, resolver):
        result = resolver.resolve([sig(Category.BUDGET, 0.5), sig(Category.GAMING, 0.45)])
        assert result.category == Category.GAMING
        assert result.runner_up == Category.BUDGET
        assert result.confidence == ConfidenceBand.LOW
        assert any("Close contest" in n for n in result.notes)

    def test_priority_winner_has_negative_margin_and_note(self, resolver):
        result = resolver.resolve([sig(Category.STUDENT, 0.5), sig(Category.GAMING, 0.46)])
        assert result.category == Category.GAMING
        assert result.margin == pytest.approx(-0.04)
        expected = "Priority tie-break: gaming ranked above higher-scoring student"
        assert any(n.startswith(expected) for n in result.notes)

    def test_score_ordered_winner_has_no_tie_break_note(self, resolver):
        result = resolver.resolve([sig(Category.GAMING, 0.5), sig(Category.STUDENT, 0.46)])
        assert result.margin == pytest.approx(0.04)
        assert not any("Priority tie-break" in n for n in result.notes)

    def test_difference_equal_to_margin_is_inside_band(self, resolver):
        result = resolver.resolve([sig(Category.BUDGET, 0.55), sig(Category.GAMING, 0.5)])
        assert result.category == Category.GAMING

    def test_difference_outside_band_uses_score(self, resolver):
        result = resolver.resolve([sig(Category.STUDENT, 0.9), sig(Category.GAMING, 0.8)])
        assert result.category == Category.STUDENT
        assert result.confidence == ConfidenceBand.HIGH
        assert any("Close contest" in n for n in result.notes)

    def test_rank_orders_every_category(self, resolver):
        board = build_score_board([sig(Category.DEVELOPER, 0.6), sig(Category.STUDENT, 0.58)])
        ranked = resolver.rank(board)
        assert ranked[:2] == [Category.DEVELOPER, Category.STUDENT]
        assert len(ranked) == len(NAMED_CATEGORIES)

    def test_close_contest_requires_medium_top_score(self, resolver):
        result = resolver.resolve([sig(Category.GAMING, 0.35), sig(Category.BUDGET, 0.3)])
        assert not any("Close contest" in n for n in result.notes)


class TestReasoning:
    def test_names_dominant_signal_source_and_score(self, resolver):
        signals = [
            sig(Category.GAMING, 0.4, source="param:color", raw="rgb"),
            sig(Category.GAMING, 0.95, source="utm_campaign", raw="summer-gaming"),
        ]
        result = resolver.resolve(signals)
        assert result.dominant_signal == signals[1]
        assert "summer-gaming" in result.reasoning
        assert "utm_campaign" in result.reasoning
        assert "1.35" in result.reasoning

    def test_resolution_is_deterministic(self, resolver):
        signals = [sig(Category.BUDGET, 0.5), sig(Category.GAMING, 0.45), sig(Category.STUDENT, 0.2)]
        first = resolver.resolve(signals)
        second = resolver.resolve(list(signals))
        assert (first.category, first.confidence) == (second.category, second.confidence)
        assert dict(first.score_board) == dict(second.score_board)

    def test_adding_signals_never_lowers_a_score(self, resolver):
        base = [sig(Category.CREATIVE, 0.3)]
        more = base + [sig(Category.CREATIVE, 0.2), sig(Category.GAMING, 0.1)]
        assert build_score_board(more)[Category.CREATIVE] >= build_score_board(base)[Category.CREATIVE]


class TestThresholdConfiguration:
    def test_thresholds_are_independent(self):
        resolver = IntentResolver(ResolutionThresholds(tie_break_margin=0.0, close_contest_margin=0.01))
        result = resolver.resolve([sig(Category.BUDGET, 0.5), sig(Category.GAMING, 0.45)])
        assert result.category == Category.BUDGET
        assert not any("Close contest" in n for n in result.notes)

    def test_incomplete_priority_order_is_rejected(self):
        with pytest.raises(ValueError):
            IntentResolver(ResolutionThresholds(priority_order=(Category.GAMING,)))
