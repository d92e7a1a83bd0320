from tortoise import fields, models
import uuid


class Fruit(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=50, unique=True)
    description = fields.CharField(max_length=30)
    storage_limit = fields.IntField() # Max amount that can be stored
    current_amount = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "fruits"
