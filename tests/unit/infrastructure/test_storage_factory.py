import fakeredis.aioredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from event_aggregator.core.config import Settings
from event_aggregator.infrastructure.memory.storage import InMemoryEventStorage
from event_aggregator.infrastructure.redis import client as redis_client
from event_aggregator.infrastructure.redis.storage import RedisEventStorage
from event_aggregator.infrastructure.storage import build_storage
from event_aggregator.utils import retry as retry_mod


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    async def _sleep(_):
        return None

    monkeypatch.setattr(retry_mod.asyncio, "sleep", _sleep)


class FlakyRedis(fakeredis.aioredis.FakeRedis):
    failures = 0

    async def ping(self, **kwargs):
        if FlakyRedis.failures > 0:
            FlakyRedis.failures -= 1
            raise RedisConnectionError("connection refused")
        return await super().ping(**kwargs)


@pytest.mark.asyncio
async def test_empty_url_selects_memory():
    storage = await build_storage(Settings(_env_file=None, redis_url=""))
    assert isinstance(storage, InMemoryEventStorage)


@pytest.mark.asyncio
async def test_url_selects_redis_with_ttl(monkeypatch):
    monkeypatch.setattr(
        redis_client.redis.Redis,
        "from_url",
        lambda url, **kw: fakeredis.aioredis.FakeRedis(**kw),
    )
    storage = await build_storage(
        Settings(
            _env_file=None,
            redis_url="redis://cache:6379/0",
            redis_event_ttl_seconds=120,
        )
    )
    assert isinstance(storage, RedisEventStorage)
    assert storage.event_ttl_seconds == 120
    assert await storage.ping() is True
    await storage.close()


@pytest.mark.asyncio
async def test_connect_retries_until_ping_succeeds(monkeypatch):
    FlakyRedis.failures = 2
    monkeypatch.setattr(
        redis_client.redis.Redis, "from_url", lambda url, **kw: FlakyRedis(**kw)
    )
    r = await redis_client.connect_redis("redis://cache:6379/0", retries=5)
    assert FlakyRedis.failures == 0
    assert await r.ping()
    await r.aclose()


@pytest.mark.asyncio
async def test_connect_gives_up_after_retries(monkeypatch):
    FlakyRedis.failures = 10
    monkeypatch.setattr(
        redis_client.redis.Redis, "from_url", lambda url, **kw: FlakyRedis(**kw)
    )
    with pytest.raises(RedisConnectionError):
        await redis_client.connect_redis("redis://cache:6379/0", retries=3)
    assert FlakyRedis.failures == 7
