"""
Module: scoring_data
Purpose: Keyword weight tables for semantic element scoring.
Dependencies: smartswap.intent.categories (enums only)

Separates scoring policy data from the classifier algorithm. Every keyword
found in the scanned string adds its weight once; matches accumulate.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from smartswap.intent.categories import Category

# Element text content (lower-cased, first 100 chars)
TEXT_SCORES: Mapping[str, int] = MappingProxyType(
    {
        "add to cart": 10,
        "add": 5,
        "buy now": 10,
        "buy": 8,
        "shop": 7,
        "compare": 10,
        "spec": 8,
        "cart": 8,
        "checkout": 10,
        "deal": 7,
        "sale": 6,
        "save": 6,
        "get started": 5,
        "learn more": 3,
        "view": 3,
        "explore": 4,
        "try": 4,
    }
)

# Class list joined with the element id
CLASS_SCORES: Mapping[str, int] = MappingProxyType(
    {
        "btn-primary": 3,
        "btn-cta": 5,
        "cta": 5,
        "add-to-cart": 8,
        "cart": 5,
        "product-card": 4,
        "hero-cta": 5,
        "compare": 6,
        "nav-link": 2,
    }
)

# aria-label
ARIA_SCORES: Mapping[str, int] = MappingProxyType(
    {
        "cart": 5,
        "add to cart": 8,
        "compare": 6,
        "navigation": 2,
        "buy": 7,
        "shop": 5,
        "checkout": 8,
    }
)

# Category guess: first rule with any substring in the text wins
CATEGORY_RULES: tuple[tuple[tuple[str, ...], Category], ...] = (
    (("gaming", "game"), Category.GAMING),
    (("compare", "spec"), Category.PRODUCTIVITY),
    (("deal", "sale", "cheap"), Category.BUDGET),
    (("creative", "design"), Category.CREATIVE),
    (("student", "campus"), Category.STUDENT),
    (("dev", "code"), Category.DEVELOPER),
)

# Event-type wording, checked against the element text in this order
CART_WORDS: tuple[str, ...] = ("cart", "buy", "checkout", "purchase")
COMPARE_WORDS: tuple[str, ...] = ("compare", "spec")
