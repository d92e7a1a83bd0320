from datetime import datetime
from typing import Any, Dict, List, Optional

from tortoise import timezone
from tortoise.exceptions import BaseORMException
from tortoise.expressions import F

from app.core.exceptions import StorageError
from app.models.event_record import EventRecord


class EventRecordStore:
    """
    Storage contract for the outbox table.

    Every mutating call accepts the caller's transaction connection ('conn')
    so the processor can apply a whole pass as one atomic unit. Tortoise
    failures are re-raised as StorageError.
    """

    async def append(
        self,
        aggregate_id: str,
        event_type: str,
        payload: Dict[str, Any],
        occurred_at: datetime,
        conn: Any = None,
    ) -> EventRecord:
        try:
            return await EventRecord.create(
                aggregate_id=aggregate_id,
                event_type=event_type,
                payload=payload,
                occurred_at=occurred_at,
                processed=False,
                retry_count=0,
                using_db=conn,
            )
        except BaseORMException as e:
            raise StorageError(f"Could not append {event_type} for {aggregate_id}: {e}") from e

    async def fetch_eligible(self, retry_ceiling: int, conn: Any = None) -> List[EventRecord]:
        """Unprocessed records under the retry ceiling, in insertion order."""
        try:
            return await (
                EventRecord.filter(processed=False, retry_count__lt=retry_ceiling)
                .order_by("id")
                .using_db(conn)
            )
        except BaseORMException as e:
            raise StorageError(f"Could not fetch eligible events: {e}") from e

    async def mark_processed(self, record_id: int, conn: Any = None) -> None:
        # Guarded on processed=False so repeat calls leave processed_at untouched
        try:
            await (
                EventRecord.filter(id=record_id, processed=False)
                .using_db(conn)
                .update(processed=True, processed_at=timezone.now())
            )
        except BaseORMException as e:
            raise StorageError(f"Could not mark event {record_id} processed: {e}") from e

    async def increment_retry(self, record_id: int, conn: Any = None) -> None:
        try:
            await (
                EventRecord.filter(id=record_id, processed=False)
                .using_db(conn)
                .update(retry_count=F("retry_count") + 1)
            )
        except BaseORMException as e:
            raise StorageError(f"Could not increment retry for event {record_id}: {e}") from e

    # --- Inspection ---

    async def get(self, record_id: int) -> Optional[EventRecord]:
        try:
            return await EventRecord.get_or_none(id=record_id)
        except BaseORMException as e:
            raise StorageError(f"Could not load event {record_id}: {e}") from e

    async def list_pending(self, retry_ceiling: int) -> List[EventRecord]:
        return await self.fetch_eligible(retry_ceiling)

    async def list_processed(self, limit: int = 100) -> List[EventRecord]:
        try:
            return await EventRecord.filter(processed=True).order_by("-id").limit(limit)
        except BaseORMException as e:
            raise StorageError(f"Could not list processed events: {e}") from e

    async def list_dead_letters(self, retry_ceiling: int) -> List[EventRecord]:
        """Records that exhausted their retries. Kept for manual inspection."""
        try:
            return await (
                EventRecord.filter(processed=False, retry_count__gte=retry_ceiling)
                .order_by("id")
            )
        except BaseORMException as e:
            raise StorageError(f"Could not list dead-lettered events: {e}") from e
