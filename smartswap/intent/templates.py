"""
Module: templates
Purpose: Hero template registry and the category -> template mapping.

Templates define HOW hero content is arranged; ContentVariant defines WHAT
is shown. The set of templates is finite and fixed.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from smartswap.intent.categories import Category, require_exhaustive


class LayoutType(str, Enum):
    CENTERED = "centered"
    SPLIT_SCREEN = "split-screen"
    MINIMAL = "minimal"


class TemplateSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str  # "image" | "text" | "cta" | "badge"
    required: bool


class TemplateConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_alignment: str  # "left" | "center" | "right"
    image_position: str  # "background" | "right" | "none"
    cta_style: str  # "stacked" | "inline" | "single"
    show_badge: bool
    overlay_opacity: float


class HeroTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    layout_type: LayoutType
    description: str
    slots: tuple[TemplateSlot, ...]
    config: TemplateConfig


_FULL_SLOTS = (
    TemplateSlot(name="hero_image", type="image", required=True),
    TemplateSlot(name="headline", type="text", required=True),
    TemplateSlot(name="subheadline", type="text", required=True),
    TemplateSlot(name="cta_primary", type="cta", required=True),
    TemplateSlot(name="cta_secondary", type="cta", required=False),
    TemplateSlot(name="badge", type="badge", required=False),
)

HERO_TEMPLATES: Mapping[str, HeroTemplate] = MappingProxyType(
    {
        "hero_centered": HeroTemplate(
            id="hero_centered",
            name="Hero Centered",
            layout_type=LayoutType.CENTERED,
            description=(
                "Full-width background image with centered text overlay. "
                "Best for emotional/aspirational intents."
            ),
            slots=_FULL_SLOTS,
            config=TemplateConfig(
                content_alignment="center",
                image_position="background",
                cta_style="inline",
                show_badge=True,
                overlay_opacity=0.85,
            ),
        ),
        "hero_split": HeroTemplate(
            id="hero_split",
            name="Hero Split-Screen",
            layout_type=LayoutType.SPLIT_SCREEN,
            description=(
                "50/50 content-image split, text left and product image right. "
                "Best for comparison/professional intents."
            ),
            slots=_FULL_SLOTS,
            config=TemplateConfig(
                content_alignment="left",
                image_position="right",
                cta_style="stacked",
                show_badge=True,
                overlay_opacity=0.0,
            ),
        ),
        "hero_minimal": HeroTemplate(
            id="hero_minimal",
            name="Hero Minimal",
            layout_type=LayoutType.MINIMAL,
            description=(
                "Text-dominant with a subtle background gradient and no hero image. "
                "Best for deal/budget intents where the offer speaks louder."
            ),
            slots=(
                TemplateSlot(name="headline", type="text", required=True),
                TemplateSlot(name="subheadline", type="text", required=True),
                TemplateSlot(name="cta_primary", type="cta", required=True),
                TemplateSlot(name="badge", type="badge", required=False),
            ),
            config=TemplateConfig(
                content_alignment="left",
                image_position="none",
                cta_style="single",
                show_badge=True,
                overlay_opacity=0.0,
            ),
        ),
    }
)

CATEGORY_TEMPLATES: Mapping[Category, str] = MappingProxyType(
    {
        Category.GAMING: "hero_centered",
        Category.CREATIVE: "hero_centered",
        Category.PRODUCTIVITY: "hero_split",
        Category.DEVELOPER: "hero_split",
        Category.BUDGET: "hero_minimal",
        Category.STUDENT: "hero_minimal",
        Category.DEFAULT: "hero_centered",
    }
)


def validate_template_table(
    mapping: Mapping[Category, str], templates: Mapping[str, HeroTemplate] = HERO_TEMPLATES
) -> None:
    """Raise ValueError unless every category maps to a registered template."""
    require_exhaustive(mapping, list(Category), "template table")
    unknown = sorted({tid for tid in mapping.values() if tid not in templates})
    if unknown:
        raise ValueError(f"template table references unknown templates: {', '.join(unknown)}")


def resolve_template(
    category: Category,
    mapping: Mapping[Category, str] = CATEGORY_TEMPLATES,
    templates: Mapping[str, HeroTemplate] = HERO_TEMPLATES,
) -> HeroTemplate:
    return templates[mapping[category]]


def list_templates() -> list[HeroTemplate]:
    return list(HERO_TEMPLATES.values())


def export_registry() -> str:
    """Templates plus category mappings as an indented JSON document."""
    return json.dumps(
        {
            "templates": {tid: t.model_dump(mode="json") for tid, t in HERO_TEMPLATES.items()},
            "mappings": [
                {"category": category.value, "template_id": template_id}
                for category, template_id in CATEGORY_TEMPLATES.items()
            ],
        },
        indent=2,
    )
