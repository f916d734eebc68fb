"""
Centralized Resolution Thresholds Configuration

All thresholds and weights used by signal collection and intent resolution.

IMPORTANT: Values are loaded from config/smartswap_policy.yaml.
This module provides typed constants and frozen bundles built from that file;
the hardcoded defaults below are used for any key the YAML does not set.

Three closeness margins exist and stay separate:
- TIE_BREAK_MARGIN: adjacent scores this close are ordered by priority
- CLOSE_CONTEST_MARGIN: top-vs-runner-up gap that triggers the advisory note
- MEDIUM_MARGIN: gap required for the medium confidence band
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml  # type: ignore[import-untyped]

from smartswap.intent.categories import NAMED_CATEGORIES, Category
from smartswap.observability.logging import get_logger

logger = get_logger(__name__)


def _load_policy_config() -> dict[str, Any]:
    """
    Load configuration from smartswap_policy.yaml.

    Side Effects:
        - Reads config/smartswap_policy.yaml file from filesystem

    Returns:
        Dict with resolution, source_weights and decay sections
    """
    possible_paths = [
        Path(__file__).parent.parent.parent / "config" / "smartswap_policy.yaml",
        Path(__file__).parent.parent / "config" / "smartswap_policy.yaml",
        Path("config/smartswap_policy.yaml"),
    ]

    for config_path in possible_paths:
        if config_path.exists():
            with open(config_path) as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Loaded resolution policy from %s", config_path)
                return config

    logger.warning("smartswap_policy.yaml not found, using hardcoded defaults")
    return {}


_POLICY_CONFIG = _load_policy_config()
_RESOLUTION_CONFIG = _POLICY_CONFIG.get("resolution", {})
_WEIGHT_CONFIG = _POLICY_CONFIG.get("source_weights", {})
_DECAY_CONFIG = _POLICY_CONFIG.get("decay", {})

# ============================================================================
# CONFIDENCE BANDS
# ============================================================================

HIGH_CONFIDENCE = float(_RESOLUTION_CONFIG.get("high_confidence", 0.8))
MEDIUM_CONFIDENCE = float(_RESOLUTION_CONFIG.get("medium_confidence", 0.4))
MEDIUM_MARGIN = float(_RESOLUTION_CONFIG.get("medium_margin", 0.1))
LOW_CONFIDENCE = float(_RESOLUTION_CONFIG.get("low_confidence", 0.3))

# ============================================================================
# CLOSENESS MARGINS
# ============================================================================

TIE_BREAK_MARGIN = float(_RESOLUTION_CONFIG.get("tie_break_margin", 0.05))
CLOSE_CONTEST_MARGIN = float(_RESOLUTION_CONFIG.get("close_contest_margin", 0.15))


def _priority_order(raw: list[str] | None) -> tuple[Category, ...]:
    default = (
        Category.GAMING,
        Category.PRODUCTIVITY,
        Category.BUDGET,
        Category.CREATIVE,
        Category.DEVELOPER,
        Category.STUDENT,
    )
    if not raw:
        return default
    try:
        order = tuple(Category(name) for name in raw)
    except ValueError:
        logger.warning("Invalid priority_order %s in policy, using default", raw)
        return default
    if set(order) != set(NAMED_CATEGORIES) or len(order) != len(NAMED_CATEGORIES):
        logger.warning("priority_order must list each named category once, using default")
        return default
    return order


PRIORITY_ORDER = _priority_order(_RESOLUTION_CONFIG.get("priority_order"))

# ============================================================================
# SIGNAL WEIGHTS
# ============================================================================

_DEFAULT_WEIGHTS: dict[str, float] = {
    "intent_exact": 1.0,
    "intent_fuzzy": 0.85,
    "utm_campaign": 0.95,
    "utm_source": 0.7,
    "utm_medium": 0.5,
    "search_query": 0.8,
    "category_tag": 0.85,
    "referrer_domain": 0.75,
    "referrer": 0.6,
    "param": 0.4,
}

SOURCE_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {key: float(_WEIGHT_CONFIG.get(key, default)) for key, default in _DEFAULT_WEIGHTS.items()}
)

COMPOUND_DECAY = float(_DECAY_CONFIG.get("compound_factor", 0.7))
DUPLICATE_SOURCE_DECAY = float(_DECAY_CONFIG.get("duplicate_source_factor", 0.7))


@dataclass(frozen=True)
class ResolutionThresholds:
    """Frozen bundle handed to IntentResolver; tests build their own."""

    high: float = HIGH_CONFIDENCE
    medium: float = MEDIUM_CONFIDENCE
    medium_margin: float = MEDIUM_MARGIN
    low: float = LOW_CONFIDENCE
    tie_break_margin: float = TIE_BREAK_MARGIN
    close_contest_margin: float = CLOSE_CONTEST_MARGIN
    priority_order: tuple[Category, ...] = PRIORITY_ORDER


@dataclass(frozen=True)
class SignalWeights:
    """Frozen bundle handed to SignalCollector."""

    by_source: Mapping[str, float] = field(default_factory=lambda: SOURCE_WEIGHTS)
    compound_decay: float = COMPOUND_DECAY
    duplicate_source_decay: float = DUPLICATE_SOURCE_DECAY

    def weight(self, source_type: str) -> float:
        return self.by_source.get(source_type, _DEFAULT_WEIGHTS.get(source_type, 0.0))
