import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from app.core.db import init_db, close_db
from app.api.v1.fruits import router as fruits_router
from app.api.v1.events import router as events_router
from app.consumers.fruit_consumers import register_fruit_handlers
from app.core.config import (
    OUTBOX_ENABLED,
    OUTBOX_INTERVAL_SECONDS,
    OUTBOX_MAX_RETRIES,
    PROJECT_NAME,
    VERSION,
)
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging_config import setup_logging
from app.events.dispatcher import EventDispatcher
from app.events.processor import OutboxProcessor
from app.events.recorder import EventRecorder
from app.events.store import EventRecordStore

setup_logging()
log = logging.getLogger(__name__)


def build_outbox(app: FastAPI) -> OutboxProcessor:
    """Wires store, dispatcher, recorder and processor onto app.state."""
    store = EventRecordStore()
    dispatcher = EventDispatcher()
    # Handlers must be registered before the processor starts
    register_fruit_handlers(dispatcher)
    processor = OutboxProcessor(
        store,
        dispatcher,
        interval_seconds=OUTBOX_INTERVAL_SECONDS,
        max_retries=OUTBOX_MAX_RETRIES,
    )
    app.state.store = store
    app.state.dispatcher = dispatcher
    app.state.recorder = EventRecorder(store)
    app.state.processor = processor
    return processor


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    processor = build_outbox(app)
    if OUTBOX_ENABLED:
        processor.start()
    yield
    await processor.stop()
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(fruits_router, prefix="/api/v1/fruits", tags=["Fruit Storage"])
app.include_router(events_router, prefix="/api/v1/events", tags=["Outbox"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
