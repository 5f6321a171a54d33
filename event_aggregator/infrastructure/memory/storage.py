from datetime import datetime
from typing import Optional

from event_aggregator.domain.aggregation import aggregate
from event_aggregator.domain.filters import EventFilter
from event_aggregator.domain.models import AggregatedData, Event
from event_aggregator.utils.concurrency import ReadWriteLock


class InMemoryEventStorage:
    """Process-local, append-only event store.

    Notes:
        - Events are kept in arrival order and never expire.
        - Appends take the write side of the lock, queries the read side.
        - Aggregates are recomputed from the full list on every query.
    """

    def __init__(self):
        self._events: list[Event] = []
        self._lock = ReadWriteLock()

    async def add_event(self, event: Event) -> None:
        async with self._lock.write():
            self._events.append(event)

    async def get_aggregated(
        self,
        user_id: str = "",
        event_type: str = "",
        from_: Optional[datetime] = None,
        to: Optional[datetime] = None,
    ) -> Optional[AggregatedData]:
        flt = EventFilter(user_id, event_type, from_, to)
        async with self._lock.read():
            matched = [e for e in self._events if flt.matches(e)]
        return aggregate(matched, user_id, event_type)

    async def get_all_aggregated(self) -> list[AggregatedData]:
        groups: dict[tuple[str, str], list[Event]] = {}
        async with self._lock.read():
            for e in self._events:
                groups.setdefault((e.user_id, e.type), []).append(e)

        results: list[AggregatedData] = []
        for (user_id, event_type), events in groups.items():
            agg = aggregate(events, user_id, event_type)
            if agg is not None:
                results.append(agg)
        return results

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None
