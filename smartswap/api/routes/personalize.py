"""
Personalization endpoints: resolve visit context, expose the template registry.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter

from smartswap.api.models import PersonalizeRequest
from smartswap.intent.composer import Decision
from smartswap.intent.engine import get_engine
from smartswap.intent.templates import export_registry
from smartswap.observability.logging import get_logger

router = APIRouter(tags=["personalization"])
logger = get_logger(__name__)


@router.post("/personalize", response_model=Decision)
async def personalize_visit(request: PersonalizeRequest) -> Decision:
    """Resolve one visit into a hero/layout Decision.

    Always succeeds for well-formed requests: unusable visit context resolves
    to the default experience with edge-case notes.
    """
    decision = get_engine().personalize(request.params, request.referrer)
    logger.debug("personalize -> %s (%s)", decision.category.value, decision.confidence.value)
    return decision


@router.get("/templates")
async def list_hero_templates() -> dict[str, Any]:
    """Template registry plus category mappings (widget configuration)."""
    return json.loads(export_registry())
