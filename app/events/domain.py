from datetime import datetime
from typing import Any, Dict, Optional

from tortoise import timezone


class DomainEvent:
    """
    Base for events raised by aggregates. The event type recorded in the
    outbox is the concrete class name (e.g. 'FruitCreated').
    """

    def __init__(self, aggregate_id: Any, occurred_at: Optional[datetime] = None):
        self.aggregate_id = str(aggregate_id)
        self.occurred_at = occurred_at or timezone.now()

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_payload(self) -> Dict[str, Any]:
        return {"aggregate_id": self.aggregate_id}

    def __repr__(self) -> str:
        return f"<{self.event_type} aggregate_id={self.aggregate_id}>"


class FruitEvent(DomainEvent):
    """Carries a snapshot of the fruit as it was when the event was raised."""

    def __init__(self, fruit, occurred_at: Optional[datetime] = None):
        super().__init__(fruit.id, occurred_at)
        self.name = fruit.name
        self.description = fruit.description
        self.storage_limit = fruit.storage_limit
        self.current_amount = fruit.current_amount

    def to_payload(self) -> Dict[str, Any]:
        return {
            "fruit_id": self.aggregate_id,
            "name": self.name,
            "description": self.description,
            "storage_limit": self.storage_limit,
            "current_amount": self.current_amount,
            "occurred_at": self.occurred_at.isoformat(),
        }


class FruitCreated(FruitEvent):
    pass


class FruitUpdated(FruitEvent):
    pass


class FruitDeleted(FruitEvent):
    pass
