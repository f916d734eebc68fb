"""
Module: keyword_data
Purpose: Keyword and referrer tables for signal collection.
Dependencies: smartswap.intent.categories (enums only)

Separates signal policy data from the collection algorithm. Edit this file
to add/remove keywords without touching collector.py. Keywords are stored in
their normalized form: lower-case, with "-", "_" and "+" folded to spaces.
Keywords shorter than 4 characters only match on word boundaries.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from smartswap.intent.categories import Category

# ---------------------------------------------------------------------------
# Category keywords, scanned in table order
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: Mapping[Category, tuple[str, ...]] = MappingProxyType(
    {
        Category.GAMING: (
            "gaming",
            "game",
            "gamer",
            "esports",
            "fps",
            "144hz",
            "240hz",
            "1ms",
            "curved",
            "rgb",
            "competitive",
            "twitch",
            "stream",
        ),
        Category.PRODUCTIVITY: (
            "office",
            "work",
            "productivity",
            "4k",
            "ergonomic",
            "usb c",
            "daisy chain",
            "professional",
            "business",
            "linkedin",
            "spreadsheet",
        ),
        Category.BUDGET: (
            "cheap",
            "budget",
            "affordable",
            "deal",
            "sale",
            "discount",
            "under 300",
            "value",
            "best price",
            "clearance",
            "bargain",
        ),
        Category.CREATIVE: (
            "creative",
            "design",
            "photo",
            "video editing",
            "color accurate",
            "artist",
            "creator",
            "dribbble",
            "behance",
            "adobe",
            "figma",
        ),
        Category.STUDENT: (
            "student",
            "campus",
            "college",
            "university",
            "school",
            "dorm",
            "edu",
        ),
        Category.DEVELOPER: (
            "developer",
            "dev",
            "code",
            "coding",
            "programming",
            "github",
            "stackoverflow",
            "terminal",
            "ide",
            "engineer",
        ),
    }
)

# ---------------------------------------------------------------------------
# Known referrers: host label (or ".tld" host suffix) -> category, no keyword scan
# ---------------------------------------------------------------------------

KNOWN_REFERRERS: tuple[tuple[str, Category], ...] = (
    ("github", Category.DEVELOPER),
    ("stackoverflow", Category.DEVELOPER),
    ("gitlab", Category.DEVELOPER),
    ("dribbble", Category.CREATIVE),
    ("behance", Category.CREATIVE),
    ("linkedin", Category.PRODUCTIVITY),
    ("twitch", Category.GAMING),
    ("slickdeals", Category.BUDGET),
    (".edu", Category.STUDENT),
)
