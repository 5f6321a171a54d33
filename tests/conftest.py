from datetime import datetime, timedelta, timezone
from itertools import count

import fakeredis.aioredis
import pytest
import pytest_asyncio

from event_aggregator.domain.models import Event
from event_aggregator.infrastructure.memory.storage import InMemoryEventStorage
from event_aggregator.infrastructure.redis.storage import RedisEventStorage

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def make_event():
    """Factory for events with sequential ids and minute-spaced timestamps."""
    ids = count(1)

    def _make(user_id="user-1", type="click", value=1.0, timestamp=None, minutes=0):
        n = next(ids)
        return Event(
            id=f"evt-{n}",
            type=type,
            user_id=user_id,
            value=value,
            timestamp=timestamp or T0 + timedelta(minutes=minutes),
        )

    return _make


@pytest_asyncio.fixture
async def fake_redis():
    """In-process Redis; emptied around every test since instances share state."""
    r = fakeredis.aioredis.FakeRedis(decode_responses=True)
    await r.flushall()
    yield r
    await r.flushall()


@pytest_asyncio.fixture
async def memory_storage():
    storage = InMemoryEventStorage()
    yield storage
    await storage.close()


@pytest_asyncio.fixture
async def redis_storage(fake_redis):
    return RedisEventStorage(fake_redis, event_ttl_seconds=86_400)


@pytest_asyncio.fixture(params=["memory", "redis"])
async def storage(request, fake_redis):
    """Each storage backend in turn, for the shared conformance tests."""
    if request.param == "memory":
        yield InMemoryEventStorage()
    else:
        yield RedisEventStorage(fake_redis, event_ttl_seconds=86_400)
