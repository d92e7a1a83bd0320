import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from app.core.config import OUTBOX_INTERVAL_SECONDS, OUTBOX_MAX_RETRIES
from app.core.exceptions import HandlerError, StorageError
from app.events.dispatcher import EventDispatcher
from app.events.store import EventRecordStore
from app.models.event_record import EventRecord

log = logging.getLogger(__name__)

MARK_PROCESSED = "mark_processed"
INCREMENT_RETRY = "increment_retry"


@dataclass
class PassResult:
    """Outcome of one processing pass, as committed."""
    processed: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    dead_lettered: List[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.processed) + len(self.failed)


class OutboxProcessor:
    """
    Drains the outbox on a fixed interval.

    A pass reads the eligible snapshot, dispatches each record in insertion
    order and stages the outcome in memory. The staged outcomes are then
    written in a single transaction, so a failed commit leaves every record
    of the pass exactly as it was before the pass started.

    At most one pass runs at a time per processor; a tick that fires while a
    pass is still running is skipped.
    """

    def __init__(
        self,
        store: EventRecordStore,
        dispatcher: EventDispatcher,
        interval_seconds: float = OUTBOX_INTERVAL_SECONDS,
        max_retries: int = OUTBOX_MAX_RETRIES,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.store = store
        self.dispatcher = dispatcher
        self.interval_seconds = interval_seconds
        self.max_retries = max_retries
        self._pass_lock = asyncio.Lock()
        self._ticker: Optional[asyncio.Task] = None
        self._current_pass: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def in_flight(self) -> bool:
        if self._pass_lock.locked():
            return True
        return self._current_pass is not None and not self._current_pass.done()

    # --- Processing pass ---

    async def run_pass(self) -> PassResult:
        """
        Runs one pass unconditionally. Handler failures are contained per
        record; a StorageError while scanning or committing aborts the pass.
        """
        records = await self.store.fetch_eligible(self.max_retries)
        result = PassResult()
        if not records:
            return result

        staged: List[Tuple[str, EventRecord]] = []
        for record in records:
            try:
                await self.dispatcher.dispatch(record.event_type, record.payload)
            except HandlerError as e:
                log.error(f"Failed to process event {record.id} ({record.event_type}): {e}")
                staged.append((INCREMENT_RETRY, record))
                result.failed.append(record.id)
                if record.retry_count + 1 >= self.max_retries:
                    result.dead_lettered.append(record.id)
            else:
                staged.append((MARK_PROCESSED, record))
                result.processed.append(record.id)

        await self._commit(staged)

        for record_id in result.dead_lettered:
            log.warning(f"Event {record_id} reached {self.max_retries} failed attempts and was dead-lettered")
        log.info(
            f"Outbox pass committed: {len(result.processed)} processed, "
            f"{len(result.failed)} failed, {len(result.dead_lettered)} dead-lettered"
        )
        return result

    async def _commit(self, staged: List[Tuple[str, EventRecord]]) -> None:
        try:
            async with in_transaction() as conn:
                for action, record in staged:
                    if action == MARK_PROCESSED:
                        await self.store.mark_processed(record.id, conn=conn)
                    else:
                        await self.store.increment_retry(record.id, conn=conn)
        except BaseORMException as e:
            raise StorageError(f"Could not commit outbox pass: {e}") from e

    async def trigger(self) -> Optional[PassResult]:
        """
        Single-flight entry point. Returns None without doing anything if a
        pass is already running.
        """
        if self._pass_lock.locked():
            log.debug("Previous outbox pass still running, skipping trigger")
            return None
        async with self._pass_lock:
            return await self.run_pass()

    # --- Scheduling ---

    async def _scheduled_pass(self) -> None:
        try:
            await self.trigger()
        except StorageError as e:
            log.error(f"Outbox pass rolled back, will retry on next trigger: {e}")
        except Exception:
            # Keep the schedule alive; the pass itself already rolled back
            log.exception("Unexpected error during outbox pass")

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            if self.in_flight:
                log.debug("Outbox pass still in flight, skipping tick")
                continue
            self._current_pass = asyncio.create_task(self._scheduled_pass())

    def start(self) -> None:
        """Starts the periodic ticker on the running event loop."""
        if self.is_running:
            return
        self._ticker = asyncio.create_task(self._tick())
        log.info(
            f"Outbox processor started (interval={self.interval_seconds}s, "
            f"max_retries={self.max_retries}, handlers for {self.dispatcher.event_types})"
        )

    async def stop(self) -> None:
        """Stops future ticks and lets an in-flight pass finish and commit."""
        if self._ticker is not None:
            self._ticker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._ticker
            self._ticker = None
        if self._current_pass is not None and not self._current_pass.done():
            await self._current_pass
        self._current_pass = None
        log.info("Outbox processor stopped.")
