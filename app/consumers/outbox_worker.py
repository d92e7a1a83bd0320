import asyncio
import logging
from app.consumers.fruit_consumers import register_fruit_handlers
from app.core.config import OUTBOX_INTERVAL_SECONDS, OUTBOX_MAX_RETRIES
from app.core.db import init_db, close_db
from app.core.logging_config import setup_logging
from app.events.dispatcher import EventDispatcher
from app.events.processor import OutboxProcessor
from app.events.store import EventRecordStore

log = logging.getLogger("outbox_worker")


def build_processor() -> OutboxProcessor:
    dispatcher = EventDispatcher()
    register_fruit_handlers(dispatcher)
    return OutboxProcessor(
        EventRecordStore(),
        dispatcher,
        interval_seconds=OUTBOX_INTERVAL_SECONDS,
        max_retries=OUTBOX_MAX_RETRIES,
    )


async def start_outbox_worker(stop_event: asyncio.Event = None):
    """
    Standalone processor service, for deployments that run the API with
    OUTBOX_ENABLED=false. Runs until stop_event is set or the task is cancelled.
    """
    await init_db()
    processor = build_processor()
    processor.start()
    log.info("--- Outbox Worker Service Started ---")

    try:
        await (stop_event or asyncio.Event()).wait()
    finally:
        await processor.stop()
        await close_db()


def main():
    setup_logging()
    try:
        asyncio.run(start_outbox_worker())
    except KeyboardInterrupt:
        log.info("Outbox worker stopped.")


if __name__ == "__main__":
    main()
