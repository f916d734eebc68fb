"""
Module: classifier
Purpose: Find the actionable element behind an interaction, score it, and
         decide its event type.
Dependencies: smartswap.tracking.scoring_data

Pipeline for one raw target:
    1. find_action_element  - walk up to 5 levels for button/link/role/product marker
    2. describe             - snapshot into an ElementDescriptor
    3. score                - text + class/id + aria keyword weights
    4. drop                 - total < 2 and not inside a product card -> no event
    5. classify_event       - cart > compare > navigation > product > generic CTA

"No event" is a normal outcome (None), not an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import NamedTuple

from smartswap.config import LISTENER_MAX_ANCESTOR_DEPTH, LISTENER_MIN_ACTIONABLE_SCORE
from smartswap.intent.categories import Category
from smartswap.observability.logging import get_logger
from smartswap.tracking.dom import ElementNode
from smartswap.tracking.models import ElementDescriptor, SemanticScore, SmartEventType
from smartswap.tracking.scoring_data import (
    ARIA_SCORES,
    CART_WORDS,
    CATEGORY_RULES,
    CLASS_SCORES,
    COMPARE_WORDS,
    TEXT_SCORES,
)

logger = get_logger(__name__)

ACTIONABLE_TAGS = frozenset({"button", "a"})
ACTIONABLE_ROLES = frozenset({"button", "link"})
NATIVE_INTERACTIVE_TAGS = frozenset({"button", "a", "input"})
PRODUCT_MARKERS = ("data-product-card", "data-product")


def is_product_marker(node: ElementNode) -> bool:
    return any(node.has_attribute(marker) for marker in PRODUCT_MARKERS)


def _is_actionable(node: ElementNode) -> bool:
    return node.tag in ACTIONABLE_TAGS or node.role in ACTIONABLE_ROLES or is_product_marker(node)


def _is_navigation(node: ElementNode) -> bool:
    return node.tag == "nav" or node.role == "navigation"


def _weigh(haystack: str, table: Mapping[str, int]) -> int:
    return sum(weight for keyword, weight in table.items() if keyword in haystack)


class Classification(NamedTuple):
    element: ElementNode
    descriptor: ElementDescriptor
    score: SemanticScore
    event_type: SmartEventType


class ElementClassifier:
    def __init__(
        self,
        text_scores: Mapping[str, int] = TEXT_SCORES,
        class_scores: Mapping[str, int] = CLASS_SCORES,
        aria_scores: Mapping[str, int] = ARIA_SCORES,
        category_rules: tuple[tuple[tuple[str, ...], Category], ...] = CATEGORY_RULES,
        max_depth: int = LISTENER_MAX_ANCESTOR_DEPTH,
        min_actionable_score: int = LISTENER_MIN_ACTIONABLE_SCORE,
    ):
        self.text_scores = text_scores
        self.class_scores = class_scores
        self.aria_scores = aria_scores
        self.category_rules = category_rules
        self.max_depth = max_depth
        self.min_actionable_score = min_actionable_score

    def find_action_element(self, target: ElementNode) -> ElementNode | None:
        """Nearest actionable element within max_depth levels (target included)."""
        for depth, node in enumerate(target.lineage()):
            if depth >= self.max_depth:
                break
            if _is_actionable(node):
                return node
        if target.tag in NATIVE_INTERACTIVE_TAGS:
            return target
        return None

    @staticmethod
    def describe(element: ElementNode) -> ElementDescriptor:
        return ElementDescriptor(
            tag=element.tag,
            text=element.text,
            class_list=element.classes,
            id=element.id or None,
            aria_label=element.get_attribute("aria-label"),
            data_attributes=element.data_attributes,
        )

    def score(self, descriptor: ElementDescriptor) -> SemanticScore:
        text = descriptor.text.lower()
        class_string = " ".join([*descriptor.class_list, descriptor.id or ""]).lower()
        aria = (descriptor.aria_label or "").lower()

        text_score = _weigh(text, self.text_scores)
        class_score = _weigh(class_string, self.class_scores)
        aria_score = _weigh(aria, self.aria_scores)

        return SemanticScore(
            text_score=text_score,
            class_score=class_score,
            aria_score=aria_score,
            total=text_score + class_score + aria_score,
            category_guess=self.guess_category(text),
        )

    def guess_category(self, text: str) -> Category | None:
        lowered = text.lower()
        for needles, category in self.category_rules:
            if any(needle in lowered for needle in needles):
                return category
        return None

    def classify_event(
        self, element: ElementNode, descriptor: ElementDescriptor, score: SemanticScore
    ) -> SmartEventType | None:
        text = descriptor.text.lower()
        if any(word in text for word in CART_WORDS):
            return SmartEventType.CART_ACTION
        if any(word in text for word in COMPARE_WORDS):
            return SmartEventType.COMPARE_CLICK
        if element.tag == "a" or element.closest(_is_navigation) is not None:
            return SmartEventType.NAV_CLICK
        if element.closest(is_product_marker) is not None:
            return SmartEventType.PRODUCT_CLICK
        if score.total >= self.min_actionable_score:
            return SmartEventType.CTA_CLICK
        return None

    def classify(self, target: ElementNode) -> Classification | None:
        """Full classification of a raw target; None means no event."""
        element = self.find_action_element(target)
        if element is None:
            return None
        descriptor = self.describe(element)
        score = self.score(descriptor)
        in_product_card = element.closest(lambda n: n.has_attribute("data-product-card")) is not None
        if score.total < self.min_actionable_score and not in_product_card:
            logger.debug("Dropped low-signal %s (total=%d)", element.tag, score.total)
            return None
        event_type = self.classify_event(element, descriptor, score)
        if event_type is None:
            return None
        return Classification(element, descriptor, score, event_type)
