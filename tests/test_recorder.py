import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

from app.core.exceptions import StorageError
from app.events.domain import FruitCreated, FruitDeleted, FruitUpdated
from app.events.recorder import EventRecorder
from app.models.event_record import EventRecord


def _fruit(**overrides):
    values = dict(id=uuid4(), name="lemon", description="this is a lemon", storage_limit=10, current_amount=0)
    values.update(overrides)
    return SimpleNamespace(**values)


class TestEventRecorder:

    @pytest.mark.asyncio
    async def test_record_appends_event(self, db, recorder):
        fruit = _fruit()
        event = FruitCreated(fruit)

        record = await recorder.record(event)

        stored = await EventRecord.get(id=record.id)
        assert stored.aggregate_id == str(fruit.id)
        assert stored.event_type == "FruitCreated"
        assert stored.payload["name"] == "lemon"
        assert stored.payload["storage_limit"] == 10
        assert stored.processed is False
        assert stored.retry_count == 0

    @pytest.mark.asyncio
    async def test_record_all_keeps_order(self, db, recorder):
        fruit = _fruit()

        records = await recorder.record_all([FruitCreated(fruit), FruitUpdated(fruit), FruitDeleted(fruit)])

        stored = await EventRecord.all().order_by("id")
        assert [r.id for r in stored] == [r.id for r in records]
        assert [r.event_type for r in stored] == ["FruitCreated", "FruitUpdated", "FruitDeleted"]

    @pytest.mark.asyncio
    async def test_storage_error_reaches_caller(self):
        store = AsyncMock()
        store.append.side_effect = StorageError("write not committed")
        recorder = EventRecorder(store)

        with pytest.raises(StorageError):
            await recorder.record(FruitCreated(_fruit()))

    def test_event_type_is_class_name(self):
        event = FruitUpdated(_fruit(current_amount=4))

        assert event.event_type == "FruitUpdated"
        assert event.to_payload()["current_amount"] == 4
        assert event.occurred_at is not None
