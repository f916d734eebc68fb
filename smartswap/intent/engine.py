"""
Personalization pipeline: collect -> resolve -> compose.

PersonalizationEngine wires the three stages together. Each stage takes its
tables through its constructor, so tests can build isolated engines; the
module-level personalize() uses a lazily built default engine.
"""

from __future__ import annotations

from collections.abc import Mapping

from smartswap.intent.collector import SignalCollector
from smartswap.intent.composer import Decision, DecisionComposer
from smartswap.intent.resolver import IntentResolver
from smartswap.observability.logging import get_logger
from smartswap.observability.structured import EventType, get_structured_logger
from smartswap.observability.telemetry import counter, time_block

logger = get_logger(__name__)


class PersonalizationEngine:
    def __init__(
        self,
        collector: SignalCollector | None = None,
        resolver: IntentResolver | None = None,
        composer: DecisionComposer | None = None,
    ):
        self.collector = collector or SignalCollector()
        self.resolver = resolver or IntentResolver()
        self.composer = composer or DecisionComposer()

    def personalize(self, params: Mapping[str, str], referrer: str = "") -> Decision:
        """Resolve visit context into a Decision. Never raises on visit input."""
        with time_block("intent.personalize.latency"):
            collected = self.collector.collect(params, referrer)
            resolution = self.resolver.resolve(collected.signals)
            decision = self.composer.compose(resolution, collected.edge_case_notes)

        counter("intent.decisions")
        counter(f"intent.category.{decision.category.value}")
        if collected.edge_case_notes:
            counter("intent.edge_cases", len(collected.edge_case_notes))

        slog = get_structured_logger()
        slog.log_event(
            EventType.SIGNALS_COLLECTED,
            signals=len(collected.signals),
            notes=len(collected.edge_case_notes),
        )
        slog.intent_resolved(
            decision.category.value,
            decision.confidence.value,
            resolution.top_score,
            len(collected.signals),
        )
        slog.log_event(
            EventType.DECISION_COMPOSED,
            template=decision.template_id,
            funnel_stage=decision.funnel_stage.value,
        )
        logger.debug("Decision: %s via %s", decision.category.value, decision.template_id)
        return decision


_default_engine: PersonalizationEngine | None = None


def get_engine() -> PersonalizationEngine:
    global _default_engine
    if _default_engine is None:
        _default_engine = PersonalizationEngine()
    return _default_engine


def personalize(params: Mapping[str, str], referrer: str = "") -> Decision:
    """Run the default engine over one visit."""
    return get_engine().personalize(params, referrer)
