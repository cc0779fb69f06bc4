import asyncio

import pytest

from app.core.cache import SessionCache, session_key, session_list_key
from app.core.management_api import ManagementApiError


class CountingFetcher:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.version = 0
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def __call__(self, key: str):
        self.calls.append(key)
        version = self.version
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return {"key": key, "version": version}


def test_cache_keys():
    assert session_key("u1", "s1") == "users/u1/sessions/s1"
    assert session_list_key("u1") == "users/u1/sessions"


@pytest.mark.asyncio
async def test_get_fetches_once_then_serves_cached():
    fetcher = CountingFetcher()
    cache = SessionCache(fetcher, ttl=300)

    first = await cache.get("users/u1/sessions")
    second = await cache.get("users/u1/sessions")

    assert first.data == {"key": "users/u1/sessions", "version": 0}
    assert second.data == first.data
    assert first.error is None
    assert fetcher.calls == ["users/u1/sessions"]


@pytest.mark.asyncio
async def test_errors_are_returned_not_cached():
    fetcher = CountingFetcher()
    fetcher.error = ManagementApiError(500, "request.general", "boom")
    cache = SessionCache(fetcher, ttl=300)

    entry = await cache.get("k")
    assert entry.data is None
    assert isinstance(entry.error, ManagementApiError)

    fetcher.error = None
    retry = await cache.get("k")
    assert retry.error is None
    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_concurrent_gets_share_one_fetch():
    fetcher = CountingFetcher()
    fetcher.gate = asyncio.Event()
    cache = SessionCache(fetcher, ttl=300)

    a = asyncio.create_task(cache.get("k"))
    b = asyncio.create_task(cache.get("k"))
    await asyncio.sleep(0)
    assert cache.peek("k").is_loading is True

    fetcher.gate.set()
    entries = await asyncio.gather(a, b)

    assert fetcher.calls == ["k"]
    assert entries[0].data == entries[1].data
    assert cache.peek("k").is_loading is False


@pytest.mark.asyncio
async def test_invalidate_revalidates_cached_key():
    fetcher = CountingFetcher()
    cache = SessionCache(fetcher, ttl=300)
    await cache.get("k")

    fetcher.version = 1
    await cache.invalidate("k")

    assert len(fetcher.calls) == 2
    assert cache.peek("k").data == {"key": "k", "version": 1}


@pytest.mark.asyncio
async def test_invalidate_uncached_key_does_not_fetch():
    fetcher = CountingFetcher()
    cache = SessionCache(fetcher, ttl=300)

    await cache.invalidate("k")

    assert fetcher.calls == []
    assert cache.peek("k").data is None


@pytest.mark.asyncio
async def test_invalidate_swallows_revalidation_error():
    fetcher = CountingFetcher()
    cache = SessionCache(fetcher, ttl=300)
    await cache.get("k")

    fetcher.error = ManagementApiError(502, "network_error", "down")
    await cache.invalidate("k")

    assert cache.peek("k").data is None


@pytest.mark.asyncio
async def test_stale_inflight_fetch_does_not_overwrite_after_invalidate():
    fetcher = CountingFetcher()
    fetcher.gate = asyncio.Event()
    cache = SessionCache(fetcher, ttl=300)

    stale = asyncio.create_task(cache.get("k"))
    await asyncio.sleep(0)
    await cache.invalidate("k")
    fetcher.gate.set()

    entry = await stale
    assert entry.data == {"key": "k", "version": 0}
    assert cache.peek("k").data is None

    fetcher.version = 1
    fresh = await cache.get("k")
    assert fresh.data == {"key": "k", "version": 1}


@pytest.mark.asyncio
async def test_generation_counters_are_dropped_once_fetches_settle():
    fetcher = CountingFetcher()
    cache = SessionCache(fetcher, ttl=300)

    for i in range(50):
        key = f"users/u{i}/sessions"
        await cache.invalidate(key)
        await cache.get(key)
        await cache.invalidate(key)

    assert cache._generations == {}
    assert cache._running == {}


class SequencedFetcher:
    """Each call waits on its own gate so fetches can settle out of order."""

    def __init__(self, count: int) -> None:
        self.gates = [asyncio.Event() for _ in range(count)]
        self.calls = 0

    async def __call__(self, key: str):
        index = self.calls
        self.calls += 1
        await self.gates[index].wait()
        return {"key": key, "call": index}


@pytest.mark.asyncio
async def test_older_fetch_settling_last_does_not_overwrite():
    fetcher = SequencedFetcher(2)
    cache = SessionCache(fetcher, ttl=300)

    older = asyncio.create_task(cache.get("k"))
    await asyncio.sleep(0)
    await cache.invalidate("k")
    newer = asyncio.create_task(cache.get("k"))
    await asyncio.sleep(0)

    fetcher.gates[1].set()
    assert (await newer).data == {"key": "k", "call": 1}
    fetcher.gates[0].set()
    await older

    assert cache.peek("k").data == {"key": "k", "call": 1}
    assert cache._generations == {}
