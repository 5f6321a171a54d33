import re
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from event_aggregator.core.logger import get_logger
from event_aggregator.core.metrics import (
    REDIS_RECORDS_SKIPPED_TOTAL,
    REDIS_WRITE_ERRORS_TOTAL,
)
from event_aggregator.domain.aggregation import aggregate
from event_aggregator.domain.errors import BackendUnavailable
from event_aggregator.domain.filters import EventFilter
from event_aggregator.domain.models import AggregatedData, Event

from . import constants

logger = get_logger("redis.storage")

_UNAVAILABLE = (RedisConnectionError, RedisTimeoutError, OSError)
_GLOB_CHARS = re.compile(r"([*?\[\]\\])")


def event_key(user_id: str, event_type: str) -> str:
    return constants.EVENTS_LIST.format(user_id=user_id, event_type=event_type)


def escape_glob(value: str) -> str:
    """Escape MATCH metacharacters so ids are matched literally."""
    return _GLOB_CHARS.sub(r"\\\1", value)


def _as_str(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisEventStorage:
    """Redis-backed event store, one list per (user, event type).

    Notes:
        - New records are LPUSHed, so each list is newest first.
        - Every write resets the key TTL (rolling retention window).
        - Writes are fire-and-forget: an unreachable Redis drops the event.
        - Records that fail to parse are skipped, never surfaced.
    """

    def __init__(self, redis: Redis, event_ttl_seconds: int):
        self.r = redis
        self.event_ttl_seconds = event_ttl_seconds

    async def add_event(self, event: Event) -> None:
        key = event_key(event.user_id, event.type)
        pipe = self.r.pipeline(transaction=False)
        pipe.lpush(key, event.model_dump_json())
        pipe.expire(key, self.event_ttl_seconds)
        try:
            await pipe.execute()
        except _UNAVAILABLE as e:
            REDIS_WRITE_ERRORS_TOTAL.inc()
            logger.warning(
                "redis_write_failed_event_dropped",
                extra={"event_id": event.id, "redis_key": key, "error": str(e)},
            )

    async def get_aggregated(
        self,
        user_id: str = "",
        event_type: str = "",
        from_: Optional[datetime] = None,
        to: Optional[datetime] = None,
    ) -> Optional[AggregatedData]:
        flt = EventFilter(user_id, event_type, from_, to)
        try:
            keys = await self._resolve_keys(user_id, event_type)
            matched: list[Event] = []
            for key in keys:
                events = await self._read_events(key, flt)
                # Patterns can over-match ids that contain ':'
                matched.extend(e for e in events if flt.matches_identity(e))
        except _UNAVAILABLE as e:
            raise BackendUnavailable(f"redis unavailable: {e}") from e
        return aggregate(matched, user_id, event_type)

    async def get_all_aggregated(self) -> list[AggregatedData]:
        results: list[AggregatedData] = []
        try:
            keys = await self._scan(constants.EVENTS_SCAN_ALL)
            for key in keys:
                parts = key.split(constants.KEY_SEPARATOR)
                if len(parts) != constants.KEY_SEGMENTS:
                    logger.debug("redis_key_malformed", extra={"redis_key": key})
                    continue
                _, user_id, event_type = parts
                events = await self._read_events(key, EventFilter())
                agg = aggregate(events, user_id, event_type)
                if agg is not None:
                    results.append(agg)
        except _UNAVAILABLE as e:
            raise BackendUnavailable(f"redis unavailable: {e}") from e
        return results

    async def ping(self) -> bool:
        try:
            return bool(await self.r.ping())
        except _UNAVAILABLE as e:
            raise BackendUnavailable(f"redis unavailable: {e}") from e

    async def close(self) -> None:
        await self.r.aclose()

    # Internals
    async def _resolve_keys(self, user_id: str, event_type: str) -> list[str]:
        if user_id and event_type:
            return [event_key(user_id, event_type)]
        if user_id:
            pattern = constants.EVENTS_SCAN_USER.format(user_id=escape_glob(user_id))
        elif event_type:
            pattern = constants.EVENTS_SCAN_TYPE.format(
                event_type=escape_glob(event_type)
            )
        else:
            pattern = constants.EVENTS_SCAN_ALL
        return await self._scan(pattern)

    async def _scan(self, pattern: str) -> list[str]:
        # SCAN may repeat keys across cursor pages
        seen: dict[str, None] = {}
        async for key in self.r.scan_iter(match=pattern):
            seen[_as_str(key)] = None
        return list(seen)

    async def _read_events(self, key: str, flt: EventFilter) -> list[Event]:
        raw_records = await self.r.lrange(key, 0, -1)
        events: list[Event] = []
        for raw in raw_records:
            try:
                event = Event.model_validate_json(raw)
            except ValidationError:
                REDIS_RECORDS_SKIPPED_TOTAL.inc()
                logger.debug("redis_record_unparseable", extra={"redis_key": key})
                continue
            if flt.matches_time(event):
                events.append(event)
        return events
