"""
Module: composer
Purpose: Map a Resolution to the Decision handed to the rendering layer.
Dependencies: smartswap.intent.variant_data, smartswap.intent.templates

Stage 3 of the intent pipeline: deterministic table lookups only.

    category -> ContentVariant (copy, CTA, hero asset, funnel stage)
    category -> template id
    funnel stage -> section order (one of three fixed permutations)

Every table is checked for full coverage when the composer is built, so a
missing category is a construction-time ValueError, never a silent fallback.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, field_validator

from smartswap.intent.categories import Category, ConfidenceBand, FunnelStage, SectionId, require_exhaustive
from smartswap.intent.templates import CATEGORY_TEMPLATES, validate_template_table
from smartswap.intent.types import Resolution
from smartswap.intent.variant_data import CONTENT_VARIANTS, ContentVariant

SECTION_ORDER: Mapping[FunnelStage, tuple[SectionId, SectionId, SectionId]] = MappingProxyType(
    {
        FunnelStage.BUY: (SectionId.PRODUCTS, SectionId.TRUST, SectionId.FUNNEL),
        FunnelStage.COMPARE: (SectionId.FUNNEL, SectionId.PRODUCTS, SectionId.TRUST),
        FunnelStage.EXPLORE: (SectionId.TRUST, SectionId.FUNNEL, SectionId.PRODUCTS),
    }
)


class CtaDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    link: str
    priority: FunnelStage


class Decision(BaseModel):
    """The structured result consumed by the rendering layer. Read-only."""

    model_config = ConfigDict(frozen=True)

    category: Category
    confidence: ConfidenceBand
    template_id: str
    funnel_stage: FunnelStage
    cta: CtaDecision
    section_order: tuple[SectionId, SectionId, SectionId]
    hero_asset_key: str
    score_board: dict[str, float]
    edge_case_notes: list[str] = []
    reasoning_log: list[str] = []
    reasoning: str = ""
    variant: ContentVariant

    @field_validator("section_order")
    @classmethod
    def _distinct_sections(
        cls, value: tuple[SectionId, SectionId, SectionId]
    ) -> tuple[SectionId, SectionId, SectionId]:
        if len(set(value)) != 3:
            raise ValueError("section_order must be a permutation of the three sections")
        return value


class DecisionComposer:
    def __init__(
        self,
        variants: Mapping[Category, ContentVariant] = CONTENT_VARIANTS,
        templates: Mapping[Category, str] = CATEGORY_TEMPLATES,
        section_order: Mapping[FunnelStage, tuple[SectionId, SectionId, SectionId]] = SECTION_ORDER,
    ):
        require_exhaustive(variants, list(Category), "variant table")
        validate_template_table(templates)
        require_exhaustive(section_order, list(FunnelStage), "section order table")
        for stage, order in section_order.items():
            if sorted(s.value for s in order) != sorted(s.value for s in SectionId):
                raise ValueError(f"section order for {stage.value} is not a permutation of all sections")
        self.variants = variants
        self.templates = templates
        self.section_order = section_order

    def compose(self, resolution: Resolution, notes: Sequence[str] = ()) -> Decision:
        """Build the Decision for a resolution.

        Args:
            resolution: resolver output
            notes: collector edge-case notes; resolver notes are appended after them
        """
        category = resolution.category
        variant = self.variants[category]
        template_id = self.templates[category]
        stage = variant.funnel_stage
        order = self.section_order[stage]
        edge_cases = [*notes, *resolution.notes]

        reasoning_log = [
            f"Intent resolved: {category.value} ({resolution.confidence.value} confidence)",
            f"Template selected: {template_id}",
            f"Funnel stage: {stage.value} -> CTA priority: {stage.value}",
            f"Hero image: {variant.hero_asset_key}",
            f"Section order: {' -> '.join(s.value for s in order)}",
            f"Primary CTA: \"{variant.cta_text}\" -> {variant.cta_link}",
            f"Edge cases handled: {len(edge_cases)}",
        ]

        return Decision(
            category=category,
            confidence=resolution.confidence,
            template_id=template_id,
            funnel_stage=stage,
            cta=CtaDecision(text=variant.cta_text, link=variant.cta_link, priority=stage),
            section_order=order,
            hero_asset_key=variant.hero_asset_key,
            score_board={c.value: score for c, score in resolution.score_board.items()},
            edge_case_notes=edge_cases,
            reasoning_log=reasoning_log,
            reasoning=resolution.reasoning,
            variant=variant,
        )
