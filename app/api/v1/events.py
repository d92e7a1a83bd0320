import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from app.api.deps import get_processor, get_store
from app.core.exceptions import StorageError
from app.events.processor import OutboxProcessor
from app.events.store import EventRecordStore
from app.models.event_record import EventRecord
from app.schemas.events import EventRecordResponse, PassResultResponse
from app.schemas.response import SuccessResponse

router = APIRouter()
log = logging.getLogger("uvicorn")


def _records(records: List[EventRecord]) -> list:
    return [EventRecordResponse(**r.to_dict()).model_dump() for r in records]


@router.get("/pending", response_model=SuccessResponse)
async def list_pending_events(
    store: EventRecordStore = Depends(get_store),
    processor: OutboxProcessor = Depends(get_processor),
):
    """Records still waiting for delivery."""
    try:
        return SuccessResponse(data=_records(await store.list_pending(processor.max_retries)))
    except StorageError as e:
        log.error(f"Error listing pending events: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Event store unavailable.")


@router.get("/processed", response_model=SuccessResponse)
async def list_processed_events(limit: int = 100, store: EventRecordStore = Depends(get_store)):
    """Most recently delivered records first."""
    try:
        return SuccessResponse(data=_records(await store.list_processed(limit)))
    except StorageError as e:
        log.error(f"Error listing processed events: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Event store unavailable.")


@router.get("/dead-letters", response_model=SuccessResponse)
async def list_dead_letters(
    store: EventRecordStore = Depends(get_store),
    processor: OutboxProcessor = Depends(get_processor),
):
    """Records that exhausted their retries and need manual attention."""
    try:
        return SuccessResponse(data=_records(await store.list_dead_letters(processor.max_retries)))
    except StorageError as e:
        log.error(f"Error listing dead-lettered events: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Event store unavailable.")


@router.post("/process", response_model=SuccessResponse)
async def process_events(processor: OutboxProcessor = Depends(get_processor)):
    """Runs one processing pass now, unless one is already running."""
    try:
        result = await processor.trigger()
    except StorageError as e:
        log.error(f"Outbox pass rolled back: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Outbox pass rolled back.")

    if result is None:
        return SuccessResponse(message="A pass is already running.", data=PassResultResponse(skipped=True).model_dump())
    data = PassResultResponse(
        processed=result.processed,
        failed=result.failed,
        dead_lettered=result.dead_lettered,
    ).model_dump()
    return SuccessResponse(data=data)


@router.get("/{record_id}", response_model=SuccessResponse)
async def get_event(record_id: int, store: EventRecordStore = Depends(get_store)):
    """Fetches a single outbox record."""
    try:
        record = await store.get(record_id)
    except StorageError as e:
        log.error(f"Error fetching event {record_id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Event store unavailable.")
    if not record:
        raise HTTPException(status_code=404, detail="Event not found")
    return SuccessResponse(data=EventRecordResponse(**record.to_dict()).model_dump())
