import logging
from typing import Any, Dict

from app.events.dispatcher import EventDispatcher

log = logging.getLogger("fruit_consumers")

FRUIT_EVENT_TYPES = ("FruitCreated", "FruitUpdated", "FruitDeleted")


async def audit_fruit_event(payload: Dict[str, Any]):
    """Writes an audit line for every fruit event delivered by the outbox."""
    log.info(
        f"AUDIT: fruit {payload['name']} ({payload['fruit_id']}) "
        f"amount={payload['current_amount']}/{payload['storage_limit']} at {payload['occurred_at']}"
    )


async def alert_storage_full(payload: Dict[str, Any]):
    """Consumer for 'FruitUpdated'. Raises an alert when storage hits its limit."""
    if payload["storage_limit"] and payload["current_amount"] >= payload["storage_limit"]:
        log.warning(
            f"ALERT: storage for {payload['name']} is full "
            f"({payload['current_amount']}/{payload['storage_limit']})"
        )


def register_fruit_handlers(dispatcher: EventDispatcher) -> None:
    """Registers the fruit consumers. Must run before the processor starts."""
    for event_type in FRUIT_EVENT_TYPES:
        dispatcher.register(event_type, audit_fruit_event)
    dispatcher.register("FruitUpdated", alert_storage_full)
