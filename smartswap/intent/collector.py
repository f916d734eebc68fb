"""
Module: collector
Purpose: Turn visit context (query parameters + referrer) into weighted signals.
Dependencies: smartswap.intent.keyword_data, smartswap.runtime.thresholds

Stage 1 of the intent pipeline. Pure and total: every input, including
malformed percent-encoding, produces a CollectedSignals result and never
raises. Problems are reported as edge-case notes.

Parameter classes, processed in this order:

    intent                      explicit override (exact 1.0, fuzzy 0.85)
    utm_campaign                campaign tag, its own family
    utm_source                  traffic source, its own family
    utm_medium                  medium, its own family
    q / query / search          "search" family
    category / tag / collection "category" family
    ref + document referrer     "referrer" family
    anything else               "param" family, scans "<key> <value>"

Decay rules (independent factors, multiplied when both apply):
    compound   - 2nd+ category matched inside one value
    duplicate  - 2nd+ signal produced by the same family in one visit
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from urllib.parse import unquote_plus, urlsplit

from smartswap.config import SEARCH_QUERY_MIN_CHARS
from smartswap.intent.categories import NAMED_CATEGORIES, Category, parse_category, require_exhaustive
from smartswap.intent.keyword_data import CATEGORY_KEYWORDS, KNOWN_REFERRERS
from smartswap.intent.types import CollectedSignals, Signal
from smartswap.observability.logging import get_logger
from smartswap.runtime.thresholds import SignalWeights

logger = get_logger(__name__)

EMPTY_VISIT_NOTE = "No visit parameters or referrer; nothing to personalize on"

_SEPARATORS = re.compile(r"[_\-+]")
_WHITESPACE = re.compile(r"\s+")

INTENT_PARAM = "intent"
UTM_PARAMS = ("utm_campaign", "utm_source", "utm_medium")
SEARCH_PARAMS = ("q", "query", "search")
CATEGORY_PARAMS = ("category", "tag", "collection")
REFERRER_PARAM = "ref"

RECOGNIZED_PARAMS = frozenset(
    (INTENT_PARAM, *UTM_PARAMS, *SEARCH_PARAMS, *CATEGORY_PARAMS, REFERRER_PARAM)
)


def normalize(text: str) -> str:
    """Lower-case, fold "_", "-" and "+" to spaces, collapse whitespace."""
    folded = _SEPARATORS.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", folded).strip()


@lru_cache(maxsize=512)
def _boundary_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])")


def keyword_position(text: str, keyword: str) -> int:
    """First index of keyword in normalized text, or -1.

    Keywords shorter than 4 characters must sit on word boundaries, so
    "ide" matches "best ide setup" but not "wide".
    """
    if len(keyword) < 4:
        match = _boundary_pattern(keyword).search(text)
        return match.start() if match else -1
    return text.find(keyword)


def params_from_query(query_string: str) -> dict[str, str]:
    """Split a raw query string into an undecoded key -> value mapping.

    Values stay encoded; SignalCollector decodes them itself so a malformed
    value can be reported instead of raising. First occurrence wins.
    """
    params: dict[str, str] = {}
    for pair in query_string.lstrip("?").split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        key = key.strip().lower()
        if key and key not in params:
            params[key] = value
    return params


def referrer_host(referrer: str) -> str:
    """Lower-case host of a referrer URL; bare values ("github.com") count as hosts."""
    value = referrer.strip()
    if "://" not in value and not value.startswith("//"):
        value = f"//{value}"
    try:
        return urlsplit(value).hostname or ""
    except ValueError:
        return ""


@dataclass(frozen=True)
class CollectorConfig:
    """Immutable tables handed to SignalCollector."""

    keywords: Mapping[Category, tuple[str, ...]] = field(default_factory=lambda: CATEGORY_KEYWORDS)
    known_referrers: tuple[tuple[str, Category], ...] = KNOWN_REFERRERS
    weights: SignalWeights = field(default_factory=SignalWeights)
    min_search_chars: int = SEARCH_QUERY_MIN_CHARS


class _VisitState:
    """Per-call bookkeeping: which families already produced a signal."""

    def __init__(self, duplicate_decay: float):
        self.duplicate_decay = duplicate_decay
        self.signals: list[Signal] = []
        self.notes: list[str] = []
        self._seen_families: set[str] = set()

    def repeated(self, family: str) -> bool:
        return family in self._seen_families

    def emit(
        self,
        family: str,
        source: str,
        raw_value: str,
        category: Category,
        weight: float,
        repeated: bool | None = None,
    ) -> None:
        if repeated is None:
            repeated = self.repeated(family)
        if repeated:
            weight *= self.duplicate_decay
            self.notes.append(
                f"Repeated {family} signal from {source}; weight decayed to {weight:.2f}"
            )
        self._seen_families.add(family)
        self.signals.append(Signal(source=source, raw_value=raw_value, category=category, weight=weight))


class SignalCollector:
    """Extracts weighted Signal records from visit parameters and referrer."""

    def __init__(self, config: CollectorConfig | None = None):
        self.config = config or CollectorConfig()
        require_exhaustive(self.config.keywords, NAMED_CATEGORIES, "keyword table")
        self._keywords = {
            category: tuple(normalize(kw) for kw in self.config.keywords[category])
            for category in NAMED_CATEGORIES
        }

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match_categories(self, text: str) -> list[Category]:
        """Categories whose keywords appear in text, ordered by first position."""
        normalized = normalize(text)
        if not normalized:
            return []
        hits: list[tuple[int, int, Category]] = []
        for order, category in enumerate(NAMED_CATEGORIES):
            positions = [
                pos for pos in (keyword_position(normalized, kw) for kw in self._keywords[category]) if pos >= 0
            ]
            if positions:
                hits.append((min(positions), order, category))
        hits.sort()
        return [category for _, _, category in hits]

    def match_referrer(self, referrer: str) -> Category | None:
        """Known-referrer category for the referrer's host, or None.

        Entries starting with "." match a host suffix (".edu"); all others
        must equal one dot-separated label of the host, so "github" matches
        "gist.github.com" but ".edu" does not match "www.education.com".
        """
        host = referrer_host(referrer)
        if not host:
            return None
        labels = host.split(".")
        for needle, category in self.config.known_referrers:
            if needle.startswith("."):
                if host.endswith(needle):
                    return category
            elif needle in labels:
                return category
        return None

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def collect(self, params: Mapping[str, str], referrer: str = "") -> CollectedSignals:
        """Collect signals for one visit.

        Args:
            params: visit parameters, values still percent-encoded
            referrer: document referrer (may be empty)

        Returns:
            CollectedSignals(signals, edge_case_notes)
        """
        referrer = referrer or ""
        if not params and not referrer.strip():
            return CollectedSignals([], [EMPTY_VISIT_NOTE])

        state = _VisitState(self.config.weights.duplicate_source_decay)
        lowered = {str(k).strip().lower(): v for k, v in params.items()}

        if INTENT_PARAM in lowered:
            self._collect_intent(lowered[INTENT_PARAM], state)

        for key in UTM_PARAMS:
            if key in lowered:
                self._collect_utm(key, lowered[key], state)

        for key in SEARCH_PARAMS:
            if key in lowered:
                self._collect_search(key, lowered[key], state)

        for key in CATEGORY_PARAMS:
            if key in lowered:
                value = self._decode(key, lowered[key], state)
                self._scan(value, "category", "category_tag", self.config.weights.weight("category_tag"), state)

        if REFERRER_PARAM in lowered:
            self._collect_referrer(self._decode(REFERRER_PARAM, lowered[REFERRER_PARAM], state), state)
        if referrer.strip():
            self._collect_referrer(self._decode("referrer", referrer, state), state)

        for key, raw in lowered.items():
            if key in RECOGNIZED_PARAMS:
                continue
            value = self._decode(key, raw, state)
            self._scan(
                f"{key} {value}",
                "param",
                f"param:{key}",
                self.config.weights.weight("param"),
                state,
                raw_value=value or key,
            )

        logger.debug("Collected %d signals (%d notes)", len(state.signals), len(state.notes))
        return CollectedSignals(state.signals, state.notes)

    # ------------------------------------------------------------------
    # Parameter classes
    # ------------------------------------------------------------------

    def _collect_intent(self, raw: str, state: _VisitState) -> None:
        value = self._decode(INTENT_PARAM, raw, state).strip()
        if not value:
            return
        exact = parse_category(value)
        if exact is Category.DEFAULT:
            state.notes.append("Explicit intent 'default' requested; no personalization signal emitted")
            return
        if exact is not None:
            state.emit("intent", "intent", value, exact, self.config.weights.weight("intent_exact"))
            return
        matches = self.match_categories(value)
        if matches:
            state.emit("intent", "intent", value, matches[0], self.config.weights.weight("intent_fuzzy"))
            state.notes.append(
                f"Fuzzy intent match: '{value}' is not a category name, matched {matches[0].value}"
            )
            return
        state.notes.append(f"Rejected intent '{value}': no matching category")

    def _collect_utm(self, key: str, raw: str, state: _VisitState) -> None:
        value = self._decode(key, raw, state)
        produced = self._scan(value, key, key, self.config.weights.weight(key), state)
        if not produced and key == "utm_campaign" and value.strip():
            state.notes.append(f"Unknown utm_campaign '{value}'")

    def _collect_search(self, key: str, raw: str, state: _VisitState) -> None:
        value = self._decode(key, raw, state).strip()
        if not value:
            return
        if len(value) < self.config.min_search_chars:
            state.notes.append(f"Search query '{value}' too short to interpret")
            return
        self._scan(value, "search", "search_query", self.config.weights.weight("search_query"), state)

    def _collect_referrer(self, value: str, state: _VisitState) -> None:
        if not value.strip():
            return
        known = self.match_referrer(value)
        if known is not None:
            state.emit("referrer", "referrer", value, known, self.config.weights.weight("referrer_domain"))
            return
        self._scan(value, "referrer", "referrer", self.config.weights.weight("referrer"), state)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _scan(
        self,
        text: str,
        family: str,
        source: str,
        weight: float,
        state: _VisitState,
        raw_value: str | None = None,
    ) -> bool:
        """Keyword-scan text and emit one signal per matched category."""
        matches = self.match_categories(text)
        raw = text if raw_value is None else raw_value
        # Family repetition is judged per value, not per compound match.
        repeated = state.repeated(family)
        for index, category in enumerate(matches):
            if index == 0:
                state.emit(family, source, raw, category, weight, repeated=repeated)
                continue
            state.notes.append(
                f"Compound signal in {source}: '{raw}' also matched {category.value} at reduced weight"
            )
            state.emit(
                family, source, raw, category, weight * self.config.weights.compound_decay, repeated=repeated
            )
        return bool(matches)

    @staticmethod
    def _decode(key: str, raw: str, state: _VisitState) -> str:
        """Percent-decode; on failure keep the raw value and note it."""
        raw = "" if raw is None else str(raw)
        try:
            return unquote_plus(raw, errors="strict")
        except UnicodeDecodeError:
            state.notes.append(f"Could not decode value for '{key}'; using raw value")
            return raw
