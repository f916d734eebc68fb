"""
Module: variant_data
Purpose: Category -> ContentVariant copy table.
Dependencies: smartswap.intent.categories (enums only)

Pure data. DecisionComposer receives this table through its constructor and
checks it covers every category, including DEFAULT.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from smartswap.intent.categories import Category, FunnelStage


class ContentVariant(BaseModel):
    """Copy and assets shown in the hero for one category."""

    model_config = ConfigDict(frozen=True)

    category: Category
    headline: str
    subhead: str
    cta_text: str
    cta_link: str
    cta_secondary: str
    cta_secondary_link: str
    hero_asset_key: str
    accent_color: str  # CSS custom property name
    badge_text: str
    funnel_stage: FunnelStage


CONTENT_VARIANTS: Mapping[Category, ContentVariant] = MappingProxyType(
    {
        Category.GAMING: ContentVariant(
            category=Category.GAMING,
            headline="Dominate the Leaderboard",
            subhead=(
                "144Hz refresh rate. 1ms response time. Zero excuses. Our gaming monitors "
                "are built for players who refuse to lose."
            ),
            cta_text="Shop Gaming Monitors",
            cta_link="/collections/gaming",
            cta_secondary="Compare Specs",
            cta_secondary_link="/compare",
            hero_asset_key="gaming",
            accent_color="--intent-gaming",
            badge_text="Gaming Collection",
            funnel_stage=FunnelStage.BUY,
        ),
        Category.PRODUCTIVITY: ContentVariant(
            category=Category.PRODUCTIVITY,
            headline="Maximize Your Efficiency",
            subhead=(
                "4K clarity. Ergonomic stands. Blue light filters. The workspace upgrade "
                "your eyes have been begging for."
            ),
            cta_text="Explore Office Displays",
            cta_link="/collections/office",
            cta_secondary="See Ergonomic Options",
            cta_secondary_link="/collections/ergonomic",
            hero_asset_key="productivity",
            accent_color="--intent-productivity",
            badge_text="Pro Workspace",
            funnel_stage=FunnelStage.COMPARE,
        ),
        Category.BUDGET: ContentVariant(
            category=Category.BUDGET,
            headline="Best Value Monitors",
            subhead=(
                "Premium quality doesn't require a premium price. Discover monitors rated "
                "4.5 stars and above, all under $300."
            ),
            cta_text="See Today's Deals",
            cta_link="/collections/deals",
            cta_secondary="Price Match Guarantee",
            cta_secondary_link="/price-match",
            hero_asset_key="budget",
            accent_color="--intent-budget",
            badge_text="Best Sellers Under $300",
            funnel_stage=FunnelStage.BUY,
        ),
        Category.CREATIVE: ContentVariant(
            category=Category.CREATIVE,
            headline="Every Color, Exactly Right",
            subhead=(
                "Factory-calibrated panels with 99% DCI-P3 coverage. See your work the way "
                "your audience will."
            ),
            cta_text="Shop Creator Monitors",
            cta_link="/collections/creator",
            cta_secondary="View Color Specs",
            cta_secondary_link="/compare",
            hero_asset_key="creative",
            accent_color="--intent-creative",
            badge_text="Creator Series",
            funnel_stage=FunnelStage.EXPLORE,
        ),
        Category.STUDENT: ContentVariant(
            category=Category.STUDENT,
            headline="Study Smarter, Game Harder",
            subhead=(
                "Dorm-ready displays with education pricing. One screen for lectures, "
                "assignments and the weekend."
            ),
            cta_text="Student Deals",
            cta_link="/collections/student",
            cta_secondary="Verify Student Status",
            cta_secondary_link="/student-verification",
            hero_asset_key="student",
            accent_color="--intent-student",
            badge_text="Education Pricing",
            funnel_stage=FunnelStage.EXPLORE,
        ),
        Category.DEVELOPER: ContentVariant(
            category=Category.DEVELOPER,
            headline="More Lines, Less Scrolling",
            subhead=(
                "Ultrawide and vertical-friendly displays with crisp text rendering. Fit the "
                "editor, the terminal and the docs on one screen."
            ),
            cta_text="Dev Setup Bundles",
            cta_link="/collections/developer",
            cta_secondary="Compare Multi-Monitor Kits",
            cta_secondary_link="/compare",
            hero_asset_key="developer",
            accent_color="--intent-developer",
            badge_text="Dev Setups",
            funnel_stage=FunnelStage.COMPARE,
        ),
        Category.DEFAULT: ContentVariant(
            category=Category.DEFAULT,
            headline="Crystal Clear Displays for Everyone",
            subhead=(
                "From gaming to productivity, find the perfect monitor that matches your "
                "world. Trusted by 50,000+ customers."
            ),
            cta_text="Browse All Monitors",
            cta_link="/collections/all",
            cta_secondary="Take the Quiz",
            cta_secondary_link="/quiz",
            hero_asset_key="default",
            accent_color="--primary",
            badge_text="New Arrivals",
            funnel_stage=FunnelStage.EXPLORE,
        ),
    }
)
