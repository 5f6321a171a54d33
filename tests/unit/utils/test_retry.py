from itertools import islice

import pytest

from event_aggregator.utils import retry as retry_mod
from event_aggregator.utils.retry import backoff_delays, retry_async


@pytest.fixture
def pauses(monkeypatch):
    slept = []

    async def _sleep(seconds):
        slept.append(seconds)

    monkeypatch.setattr(retry_mod.asyncio, "sleep", _sleep)
    return slept


def test_backoff_doubles_until_cap():
    assert list(islice(backoff_delays(first=1, cap=5, spread=0), 5)) == [1, 2, 4, 5, 5]


def test_backoff_spread_only_lengthens():
    for d in islice(backoff_delays(first=2, cap=2, spread=0.5), 50):
        assert 2 <= d <= 3


@pytest.mark.asyncio
async def test_returns_after_transient_failures(pauses):
    calls = {"n": 0}
    seen = []

    async def flaky():
        calls["n"] += 1
        if calls["n"] < 3:
            raise ConnectionError("down")
        return "ok"

    result = await retry_async(
        flaky,
        attempts=5,
        delays=iter([0.1, 0.2, 0.3]),
        on_retry=lambda attempt, exc, pause: seen.append((attempt, str(exc), pause)),
    )
    assert result == "ok"
    assert calls["n"] == 3
    assert seen == [(1, "down", 0.1), (2, "down", 0.2)]
    assert pauses == [0.1, 0.2]


@pytest.mark.asyncio
async def test_reraises_after_exhausting_attempts(pauses):
    calls = {"n": 0}

    async def always_fails():
        calls["n"] += 1
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        await retry_async(always_fails, attempts=3)
    assert calls["n"] == 3
    assert len(pauses) == 2


@pytest.mark.asyncio
async def test_does_not_retry_unlisted_errors(pauses):
    calls = {"n": 0}

    async def bad():
        calls["n"] += 1
        raise ValueError("nope")

    with pytest.raises(ValueError):
        await retry_async(bad, attempts=5, retry_on=(ConnectionError,))
    assert calls["n"] == 1
    assert pauses == []
