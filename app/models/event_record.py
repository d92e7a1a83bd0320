from tortoise import fields, models


class EventRecord(models.Model):
    """
    Outbox table. One row per captured domain event, written after the
    aggregate's own write has committed and drained by the OutboxProcessor.

    Only processed, processed_at and retry_count ever change after insert.
    """
    # Auto-increment id doubles as insertion order for the processor scan
    id = fields.BigIntField(primary_key=True)
    aggregate_id = fields.CharField(max_length=128)
    event_type = fields.CharField(max_length=128) # e.g. 'FruitCreated'
    payload = fields.JSONField()
    occurred_at = fields.DatetimeField() # Supplied by the producer, not insertion time
    processed = fields.BooleanField(default=False)
    processed_at = fields.DatetimeField(null=True)
    retry_count = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "event_records"
        indexes = [
            ("processed", "retry_count"), # Eligible scan
            ("aggregate_id",),
            ("event_type",),
        ]

    def to_dict(self) -> dict:
        """Persisted record shape exposed to external readers."""
        return {
            "id": self.id,
            "aggregateId": self.aggregate_id,
            "eventType": self.event_type,
            "payload": self.payload,
            "occurredAt": self.occurred_at.isoformat() if self.occurred_at else None,
            "processed": self.processed,
            "processedAt": self.processed_at.isoformat() if self.processed_at else None,
            "retryCount": self.retry_count,
        }
