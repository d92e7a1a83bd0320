from pydantic import BaseModel, Field
from typing import Any, List, Optional


class EventRecordResponse(BaseModel):
    """Persisted outbox record, using the external field names."""
    id: int
    aggregateId: str
    eventType: str
    payload: Any
    occurredAt: Optional[str] = None
    processed: bool
    processedAt: Optional[str] = None
    retryCount: int


class PassResultResponse(BaseModel):
    """Outcome of a processing pass triggered through the API."""
    skipped: bool = False
    processed: List[int] = Field(default_factory=list)
    failed: List[int] = Field(default_factory=list)
    dead_lettered: List[int] = Field(default_factory=list)
