"""Bounded ingestion queue drained by a single background consumer task."""

from __future__ import annotations

import asyncio
from typing import Optional

from event_aggregator.core.logger import get_logger
from event_aggregator.core.metrics import (
    EVENTS_DROPPED_TOTAL,
    EVENTS_PROCESSED_TOTAL,
    EVENTS_REJECTED_TOTAL,
    EVENTS_SUBMITTED_TOTAL,
    QUEUE_CURRENT_SIZE,
    STORAGE_APPLY_ERRORS_TOTAL,
)
from event_aggregator.domain.errors import QueueTimeout
from event_aggregator.domain.models import Event
from event_aggregator.infrastructure.storage import EventStorage

logger = get_logger("ingestion_queue")


class IngestionQueue:
    """FIFO hand-off between request handlers and the storage backend.

    ``submit`` waits at most ``enqueue_timeout`` seconds for room and raises
    QueueTimeout otherwise. Exactly one consumer task applies events to
    storage, one at a time and in queue order. Stopping cancels that task;
    whatever is still queued is dropped.
    """

    def __init__(self, storage: EventStorage, capacity: int, enqueue_timeout: float):
        if capacity < 1:
            raise ValueError("queue capacity must be at least 1")
        self.storage = storage
        self.capacity = capacity
        self.enqueue_timeout = enqueue_timeout
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=capacity)
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def qsize(self) -> int:
        return self._queue.qsize()

    async def submit(self, event: Event) -> None:
        try:
            if self.enqueue_timeout <= 0:
                self._queue.put_nowait(event)
            else:
                await asyncio.wait_for(self._queue.put(event), self.enqueue_timeout)
        except (asyncio.QueueFull, asyncio.TimeoutError) as e:
            EVENTS_REJECTED_TOTAL.inc()
            logger.warning(
                "ingestion_queue_full",
                extra={
                    "event_id": event.id,
                    "capacity": self.capacity,
                    "timeout_s": self.enqueue_timeout,
                },
            )
            raise QueueTimeout(self.enqueue_timeout, self.capacity) from e
        EVENTS_SUBMITTED_TOTAL.inc()
        QUEUE_CURRENT_SIZE.set(self._queue.qsize())

    def start(self) -> None:
        if self.running:
            raise RuntimeError("ingestion consumer already running")
        self._task = asyncio.create_task(self._consume(), name="ingestion-consumer")
        logger.info("ingestion_consumer_started", extra={"capacity": self.capacity})

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:  # expected during shutdown
            logger.debug("ingestion_consumer_cancelled")
        dropped = self._discard_pending()
        if dropped:
            EVENTS_DROPPED_TOTAL.inc(dropped)
        logger.info("ingestion_consumer_stopped", extra={"dropped_events": dropped})

    async def join(self) -> None:
        """Wait until every event queued so far has been applied."""
        await self._queue.join()

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.storage.add_event(event)
                EVENTS_PROCESSED_TOTAL.inc()
                logger.debug(
                    "event_processed",
                    extra={
                        "event_id": event.id,
                        "user_id": event.user_id,
                        "event_type": event.type,
                        "value": event.value,
                    },
                )
            except Exception as e:
                STORAGE_APPLY_ERRORS_TOTAL.inc()
                logger.exception(
                    "event_apply_failed",
                    extra={"event_id": event.id, "error": str(e)},
                )
            finally:
                self._queue.task_done()
                QUEUE_CURRENT_SIZE.set(self._queue.qsize())

    def _discard_pending(self) -> int:
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._queue.task_done()
            dropped += 1
        QUEUE_CURRENT_SIZE.set(0)
        return dropped
