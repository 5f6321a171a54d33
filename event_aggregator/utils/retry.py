import asyncio
import random
from typing import Awaitable, Callable, Iterator, Optional, TypeVar

T = TypeVar("T")


def backoff_delays(
    first: float = 0.5, cap: float = 10.0, spread: float = 0.1
) -> Iterator[float]:
    """Yield doubling sleep intervals, capped at ``cap``, each stretched by up
    to ``spread`` of itself so concurrent clients do not retry in lockstep."""
    step = first
    while True:
        base = min(step, cap)
        yield base * (1 + random.random() * spread)
        step = base * 2


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    attempts: int = 5,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    delays: Optional[Iterator[float]] = None,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
) -> T:
    """Call ``func`` up to ``attempts`` times.

    Only exceptions in ``retry_on`` are retried; the failure from the final
    attempt propagates unchanged. ``on_retry(attempt, exc, pause)`` is invoked
    before each pause.
    """
    schedule = delays if delays is not None else backoff_delays()
    attempt = 1
    while True:
        try:
            return await func()
        except retry_on as exc:
            if attempt >= attempts:
                raise
            pause = next(schedule)
            if on_retry is not None:
                on_retry(attempt, exc, pause)
            await asyncio.sleep(pause)
            attempt += 1
