"""
Module: models
Purpose: Payload types for the behavioral event pipeline.
Dependencies: smartswap.intent.categories (Category only)

EventRecord and Batch are the contract with the delivery sink and the
persistence snapshot, so every model here round-trips through
model_dump(mode="json") / model_validate().
"""

from __future__ import annotations

import random
import string
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from smartswap.config import ELEMENT_CLASS_MAX, ELEMENT_TEXT_MAX_CHARS
from smartswap.intent.categories import Category

_BASE36 = string.digits + string.ascii_lowercase


def base36(value: int) -> str:
    if value <= 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id(prefix: str, now_ms: float, suffix_len: int = 4) -> str:
    """`<prefix>_<base36 ms>_<random base36>`, e.g. evt_lq2x9k1c_a7f3."""
    suffix = "".join(random.choices(_BASE36, k=suffix_len))
    return f"{prefix}_{base36(int(now_ms))}_{suffix}"


class SmartEventType(str, Enum):
    CTA_CLICK = "CTA_CLICK"
    NAV_CLICK = "NAV_CLICK"
    PRODUCT_CLICK = "PRODUCT_CLICK"
    COMPARE_CLICK = "COMPARE_CLICK"
    CART_ACTION = "CART_ACTION"
    UX_FRICTION = "UX_FRICTION"
    SCROLL_MILESTONE = "SCROLL_MILESTONE"
    CUSTOM = "CUSTOM"


class FlushTrigger(str, Enum):
    BATCH_FULL = "batch_full"
    PAGE_TRANSITION = "page_transition"
    IDLE = "idle"
    INTERVAL = "interval"
    MANUAL = "manual"


class ElementDescriptor(BaseModel):
    """Snapshot of an interacted element. Never a live reference."""

    model_config = ConfigDict(frozen=True)

    tag: str
    text: str = ""
    class_list: tuple[str, ...] = ()
    id: str | None = None
    aria_label: str | None = None
    data_attributes: dict[str, str] = Field(default_factory=dict)

    @field_validator("tag")
    @classmethod
    def _lower_tag(cls, value: str) -> str:
        return value.lower()

    @field_validator("text")
    @classmethod
    def _truncate_text(cls, value: str) -> str:
        return value.strip()[:ELEMENT_TEXT_MAX_CHARS]

    @field_validator("class_list")
    @classmethod
    def _cap_classes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(value[:ELEMENT_CLASS_MAX])


class SemanticScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    text_score: int = 0
    class_score: int = 0
    aria_score: int = 0
    total: int = 0
    category_guess: Category | None = None


class EventRecord(BaseModel):
    """One classified interaction, as queued, persisted and delivered."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: SmartEventType
    variant_id: str
    cumulative_session_score: float = Field(ge=0.0, le=1.0)
    path: str
    is_friction: bool = False
    timestamp: datetime
    session_id: str
    semantic_score: SemanticScore = Field(default_factory=SemanticScore)
    element_descriptor: ElementDescriptor | None = None
    middleware_data: dict[str, Any] = Field(default_factory=dict)


class DedupStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_received: int
    duplicates_dropped: int
    unique_dispatched: int


class Batch(BaseModel):
    """A flushed group of records. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str
    session_id: str
    events: tuple[EventRecord, ...]
    flushed_at: datetime
    trigger: FlushTrigger
    event_count: int
    dedup_stats: DedupStats


class LedgerStats(BaseModel):
    """Point-in-time copy of the ledger's running counters."""

    total_events_received: int = 0
    total_events_flushed: int = 0
    total_batches_sent: int = 0
    total_duplicates_dropped: int = 0
    queue_size: int = 0
    last_flush_at: datetime | None = None
    last_flush_trigger: FlushTrigger | None = None
