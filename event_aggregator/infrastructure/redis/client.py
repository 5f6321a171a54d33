import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from event_aggregator.core.logger import get_logger
from event_aggregator.utils.retry import backoff_delays, retry_async

logger = get_logger("redis.client")


async def connect_redis(url: str, retries: int = 6) -> redis.Redis:
    """Open a Redis client and verify it with PING, backing off on failure."""

    async def _connect() -> redis.Redis:
        r = redis.Redis.from_url(url, decode_responses=True)
        try:
            await r.ping()
        except BaseException:
            await r.aclose()
            raise
        return r

    def _log_retry(attempt: int, exc: BaseException, pause: float) -> None:
        logger.warning(
            "redis_connect_retry",
            extra={"attempt": attempt, "error": str(exc), "pause": round(pause, 2)},
        )

    r = await retry_async(
        _connect,
        attempts=retries,
        retry_on=(RedisConnectionError, RedisTimeoutError, OSError),
        delays=backoff_delays(first=0.5, cap=8.0, spread=0.2),
        on_retry=_log_retry,
    )
    logger.info("redis_connected")
    return r
