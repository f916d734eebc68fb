"""
End-to-end personalization scenarios through PersonalizationEngine.
"""

from __future__ import annotations

import pytest

from smartswap.intent import PersonalizationEngine, personalize
from smartswap.intent.categories import Category, ConfidenceBand, FunnelStage, SectionId
from smartswap.intent.collector import EMPTY_VISIT_NOTE, params_from_query
from smartswap.intent.engine import get_engine
from smartswap.intent.resolver import NO_SIGNALS_REASONING, IntentResolver
from smartswap.observability.telemetry import get_counters, get_latency_stats
from smartswap.runtime.thresholds import ResolutionThresholds


@pytest.fixture
def engine():
    return PersonalizationEngine()


def visit(engine, query: str, referrer: str = ""):
    return engine.personalize(params_from_query(query), referrer)


class TestScenarios:
    def test_gaming_campaign(self, engine):
        decision = visit(engine, "?utm_campaign=gaming")
        assert decision.category == Category.GAMING
        assert decision.confidence == ConfidenceBand.HIGH
        assert decision.template_id == "hero_centered"
        assert decision.funnel_stage == FunnelStage.BUY
        assert decision.score_board["gaming"] == pytest.approx(0.95)

    def test_compound_search_picks_first_keyword(self, engine):
        decision = visit(engine, "?q=cheap+gaming+monitor")
        assert decision.category == Category.BUDGET
        assert decision.confidence == ConfidenceBand.HIGH
        assert decision.template_id == "hero_minimal"
        assert decision.score_board["budget"] > decision.score_board["gaming"] > 0
        assert any("Compound signal" in n for n in decision.edge_case_notes)

    def test_empty_visit_gets_default(self, engine):
        decision = visit(engine, "")
        assert decision.category == Category.DEFAULT
        assert decision.confidence == ConfidenceBand.LOW
        assert decision.edge_case_notes == [EMPTY_VISIT_NOTE]
        assert decision.reasoning == NO_SIGNALS_REASONING
        assert decision.section_order == (SectionId.TRUST, SectionId.FUNNEL, SectionId.PRODUCTS)

    def test_professional_referrer_is_medium(self, engine):
        decision = visit(engine, "", "https://www.linkedin.com/in/someone")
        assert decision.category == Category.PRODUCTIVITY
        assert decision.confidence == ConfidenceBand.MEDIUM
        assert decision.template_id == "hero_split"

    def test_explicit_intent_beats_search(self, engine):
        decision = visit(engine, "?intent=gaming&q=cheap")
        assert decision.category == Category.GAMING
        assert decision.score_board["budget"] == pytest.approx(0.8)

    def test_unknown_params_only_is_default(self, engine):
        decision = visit(engine, "?size=27&color=black")
        assert decision.category == Category.DEFAULT
        assert decision.edge_case_notes == []

    def test_weak_signal_falls_back_with_board_intact(self):
        strict = PersonalizationEngine(resolver=IntentResolver(ResolutionThresholds(low=0.5, medium=0.6)))
        decision = visit(strict, "?finish=rgb")
        assert decision.category == Category.DEFAULT
        assert decision.score_board["gaming"] == pytest.approx(0.4)
        assert any("below threshold" in n for n in decision.edge_case_notes)

    def test_malformed_encoding_never_raises(self, engine):
        decision = visit(engine, "?q=%E0%A4%A&utm_campaign=%")
        assert decision.category in set(Category)

    def test_reasoning_log_reports_edge_cases(self, engine):
        decision = visit(engine, "?utm_campaign=mobilephones&q=4k+office")
        assert decision.category == Category.PRODUCTIVITY
        assert decision.reasoning_log[-1] == f"Edge cases handled: {len(decision.edge_case_notes)}"


class TestDeterminism:
    def test_same_visit_same_decision(self, engine):
        first = visit(engine, "?utm_source=twitch&q=budget")
        second = visit(engine, "?utm_source=twitch&q=budget")
        assert first == second

    def test_module_level_engine_is_shared(self):
        assert get_engine() is get_engine()
        assert personalize({"intent": "student"}).category == Category.STUDENT


class TestTelemetry:
    def test_counts_decisions_and_categories(self, engine):
        visit(engine, "?utm_campaign=gaming")
        visit(engine, "")
        counters = get_counters()
        assert counters["intent.decisions"] == 2
        assert counters["intent.category.gaming"] == 1
        assert counters["intent.category.default"] == 1
        assert counters["intent.edge_cases"] == 1

    def test_records_latency(self, engine):
        visit(engine, "?q=student")
        stats = get_latency_stats("intent.personalize.latency")
        assert stats["count"] == 1
