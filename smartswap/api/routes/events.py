"""
Event batch intake: the receiving end of a ledger delivery sink.

Validates the Batch shape, bounds client-supplied middleware data, counts
what was accepted. Storage of accepted rows is out of scope.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from smartswap.api.models import BatchReceipt, validate_dict_structure
from smartswap.config import API_MAX_BATCH_EVENTS
from smartswap.observability.logging import get_logger
from smartswap.observability.structured import EventType, get_structured_logger
from smartswap.observability.telemetry import counter
from smartswap.tracking.models import Batch

router = APIRouter(prefix="/events", tags=["events"])
logger = get_logger(__name__)


@router.post("/batches", response_model=BatchReceipt, status_code=status.HTTP_202_ACCEPTED)
async def receive_batch(batch: Batch) -> BatchReceipt:
    if len(batch.events) > API_MAX_BATCH_EVENTS:
        counter("api.batches_rejected")
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Batch exceeds {API_MAX_BATCH_EVENTS} events",
        )
    if batch.event_count != len(batch.events):
        counter("api.batches_rejected")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="event_count does not match number of events",
        )

    for record in batch.events:
        try:
            validate_dict_structure(record.middleware_data)
        except ValueError as e:
            counter("api.batches_rejected")
            logger.warning("Rejected batch %s: %s", batch.id, e)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="middleware_data exceeds allowed structure",
            ) from e

    friction = sum(1 for record in batch.events if record.is_friction)
    counter("api.batches_received")
    counter("api.events_received", len(batch.events))
    get_structured_logger().log_event(
        EventType.BATCH_RECEIVED,
        session_id=batch.session_id,
        batch=batch.id,
        trigger=batch.trigger.value,
        event_count=len(batch.events),
        friction=friction,
    )
    return BatchReceipt(batch_id=batch.id, accepted=len(batch.events), friction_events=friction)
