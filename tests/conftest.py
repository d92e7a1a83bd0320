import os

# Must be set before app.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("OUTBOX_ENABLED", "false")

import pytest
import pytest_asyncio

from app.core.db import init_db, close_db
from app.events.dispatcher import EventDispatcher
from app.events.recorder import EventRecorder
from app.events.store import EventRecordStore


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database per test."""
    await init_db("sqlite://:memory:")
    yield
    await close_db()


@pytest.fixture
def store():
    return EventRecordStore()


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def recorder(store):
    return EventRecorder(store)
