"""
Module: categories
Purpose: Closed enumerations shared by the intent engine and the tracker.
Dependencies: None

Every table keyed by one of these enums is checked for full coverage with
require_exhaustive() when it is handed to a constructor.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TypeVar


class Category(str, Enum):
    """Visitor intent category.

    Extends str so JSON serialization produces raw strings (e.g. "gaming").
    """

    GAMING = "gaming"
    PRODUCTIVITY = "productivity"
    BUDGET = "budget"
    CREATIVE = "creative"
    STUDENT = "student"
    DEVELOPER = "developer"
    DEFAULT = "default"


NAMED_CATEGORIES: tuple[Category, ...] = tuple(c for c in Category if c is not Category.DEFAULT)


class ConfidenceBand(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FunnelStage(str, Enum):
    """Visitor readiness: ready to transact, actively comparing, exploring."""

    BUY = "buy"
    COMPARE = "compare"
    EXPLORE = "explore"


class SectionId(str, Enum):
    """Page sections below the hero."""

    PRODUCTS = "products"  # transactional
    FUNNEL = "funnel"  # decision support
    TRUST = "trust"  # trust building


K = TypeVar("K", bound=Enum)


def require_exhaustive(table: Mapping[K, object], keys: Iterable[K], name: str) -> None:
    """Raise ValueError if `table` misses any of `keys`.

    Raises:
        ValueError: listing the missing keys
    """
    missing = [k.value for k in keys if k not in table]
    if missing:
        raise ValueError(f"{name} is missing entries for: {', '.join(missing)}")


def parse_category(value: str) -> Category | None:
    """Exact (case-insensitive) category name lookup; None when unknown."""
    try:
        return Category(value.strip().lower())
    except ValueError:
        return None
