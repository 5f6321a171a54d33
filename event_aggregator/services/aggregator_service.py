from datetime import datetime
from typing import Optional

from event_aggregator.core.metrics import QUERY_LATENCY_SECONDS
from event_aggregator.domain.models import AggregatedData, Event
from event_aggregator.infrastructure.queue.ingestion import IngestionQueue
from event_aggregator.infrastructure.storage import EventStorage


class AggregatorService:
    """Submit/query facade over the ingestion queue and the storage backend.

    Performs no validation; the request layer checks required fields and
    fills in id/timestamp defaults before calling ``submit``.
    """

    def __init__(
        self, storage: EventStorage, queue_capacity: int, enqueue_timeout: float
    ):
        self.storage = storage
        self.queue = IngestionQueue(storage, queue_capacity, enqueue_timeout)

    @property
    def running(self) -> bool:
        return self.queue.running

    def start(self) -> None:
        self.queue.start()

    async def stop(self) -> None:
        await self.queue.stop()

    async def submit(self, event: Event) -> None:
        await self.queue.submit(event)

    async def query(
        self,
        user_id: str = "",
        event_type: str = "",
        from_: Optional[datetime] = None,
        to: Optional[datetime] = None,
    ) -> Optional[AggregatedData]:
        with QUERY_LATENCY_SECONDS.time():
            return await self.storage.get_aggregated(user_id, event_type, from_, to)

    async def query_all(self) -> list[AggregatedData]:
        with QUERY_LATENCY_SECONDS.time():
            return await self.storage.get_all_aggregated()

    async def ping(self) -> bool:
        return await self.storage.ping()
