"""Health check and debug endpoints for the SmartSwap API.

- /health - Service liveness and version
- /debug/stats - In-process counters and latency percentiles (no PII)
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from smartswap.config import APP_VERSION
from smartswap.observability.telemetry import get_counters, get_latency_stats

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "SmartSwap API",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/debug/stats")
async def debug_stats() -> dict[str, Any]:
    """Aggregate counters and personalize latency. Contains no PII."""
    return {
        "counters": get_counters(),
        "latency": {"personalize": get_latency_stats("intent.personalize.latency")},
        "timestamp": datetime.now(UTC).isoformat(),
    }
