import logging
import pytest

from app.consumers.fruit_consumers import (
    FRUIT_EVENT_TYPES,
    alert_storage_full,
    audit_fruit_event,
    register_fruit_handlers,
)
from app.core.exceptions import HandlerError
from app.events.dispatcher import EventDispatcher


def _payload(**overrides):
    payload = {
        "fruit_id": "f1",
        "name": "lemon",
        "description": "this is a lemon",
        "storage_limit": 10,
        "current_amount": 10,
        "occurred_at": "2024-05-01T12:00:00",
    }
    payload.update(overrides)
    return payload


class TestConsumers:

    def test_handlers_registered_for_every_fruit_event(self):
        dispatcher = EventDispatcher()
        register_fruit_handlers(dispatcher)

        for event_type in FRUIT_EVENT_TYPES:
            assert dispatcher.handlers_for(event_type)[0] is audit_fruit_event
        assert dispatcher.handlers_for("FruitUpdated") == (audit_fruit_event, alert_storage_full)

    @pytest.mark.asyncio
    async def test_full_storage_raises_alert(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fruit_consumers"):
            await alert_storage_full(_payload())

        assert "storage for lemon is full" in caplog.text

    @pytest.mark.asyncio
    async def test_no_alert_below_limit(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fruit_consumers"):
            await alert_storage_full(_payload(current_amount=3))

        assert caplog.text == ""

    @pytest.mark.asyncio
    async def test_malformed_payload_fails_dispatch(self):
        """A payload missing fields fails the handler so the outbox retries it."""
        dispatcher = EventDispatcher()
        register_fruit_handlers(dispatcher)

        with pytest.raises(HandlerError):
            await dispatcher.dispatch("FruitCreated", {"name": "lemon"})
