# app/models/__init__.py
from .event_record import EventRecord
from .fruit import Fruit

# Export all models
__all__ = [
    "EventRecord",
    "Fruit",
]
