import logging
from typing import Iterable, List

from app.events.domain import DomainEvent
from app.events.store import EventRecordStore
from app.models.event_record import EventRecord

log = logging.getLogger(__name__)


class EventRecorder:
    """
    Ingestion entry point. Application code calls record() right after the
    aggregate's own write has committed.

    Recording after the commit means a crash between the two writes loses the
    event instead of publishing one for a change that never persisted.
    """

    def __init__(self, store: EventRecordStore):
        self.store = store

    async def record(self, event: DomainEvent) -> EventRecord:
        # StorageError propagates: the caller must not assume the event was recorded
        record = await self.store.append(
            aggregate_id=event.aggregate_id,
            event_type=event.event_type,
            payload=event.to_payload(),
            occurred_at=event.occurred_at,
        )
        log.info(f"Recorded {event.event_type} for aggregate {event.aggregate_id} (event {record.id})")
        return record

    async def record_all(self, events: Iterable[DomainEvent]) -> List[EventRecord]:
        return [await self.record(event) for event in events]
