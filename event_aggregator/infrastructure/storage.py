from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from event_aggregator.core.config import Settings
from event_aggregator.core.logger import get_logger
from event_aggregator.domain.models import AggregatedData, Event

logger = get_logger("storage")


@runtime_checkable
class EventStorage(Protocol):
    """Capability set every storage backend provides.

    Backends own the raw event set; callers only ever see the aggregates
    computed from it.
    """

    async def add_event(self, event: Event) -> None: ...

    async def get_aggregated(
        self,
        user_id: str = "",
        event_type: str = "",
        from_: Optional[datetime] = None,
        to: Optional[datetime] = None,
    ) -> Optional[AggregatedData]: ...

    async def get_all_aggregated(self) -> list[AggregatedData]: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


async def build_storage(settings: Settings) -> EventStorage:
    """Redis when ``redis_url`` is set, in-memory otherwise."""
    if settings.redis_url:
        from event_aggregator.infrastructure.redis.client import connect_redis
        from event_aggregator.infrastructure.redis.storage import RedisEventStorage

        logger.info("storage_backend_selected", extra={"backend": "redis"})
        client = await connect_redis(settings.redis_url, settings.redis_connect_retries)
        return RedisEventStorage(client, settings.redis_event_ttl_seconds)

    from event_aggregator.infrastructure.memory.storage import InMemoryEventStorage

    logger.info("storage_backend_selected", extra={"backend": "memory"})
    return InMemoryEventStorage()
