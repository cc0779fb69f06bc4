"""Fetch-by-key cache for Management API reads.

Contract (as seen by views):
  get(key)        -> CacheEntry(data, error, is_loading)
  invalidate(key) -> revalidate the entry on demand

Only successful results are stored. Errors are handed back to the caller and
never cached, so retrying a failed read re-issues the fetch. Each key carries
a generation counter: invalidating a key bumps it, and a fetch that started
under an older generation does not write its result back. Counters only
exist while a fetch for the key is running.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from cachetools import TTLCache

logger = logging.getLogger("session_console.cache")

Fetcher = Callable[[str], Awaitable[Any]]


def session_key(user_id: str, session_id: str) -> str:
    return f"users/{user_id}/sessions/{session_id}"


def session_list_key(user_id: str) -> str:
    return f"users/{user_id}/sessions"


@dataclass(frozen=True)
class CacheEntry:
    data: Any = None
    error: Exception | None = None
    is_loading: bool = False


class SessionCache:
    """Keyed cache with shared in-flight fetches and manual revalidation."""

    def __init__(self, fetcher: Fetcher, *, maxsize: int = 1024, ttl: float = 30) -> None:
        self._fetcher = fetcher
        self._store: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        # key -> (generation, fetch task)
        self._inflight: dict[str, tuple[int, asyncio.Future]] = {}
        self._generations: dict[str, int] = {}
        # key -> fetches started and not yet settled
        self._running: dict[str, int] = {}

    def peek(self, key: str) -> CacheEntry:
        """Synchronous read of whatever is cached right now."""
        return CacheEntry(data=self._store.get(key), is_loading=key in self._inflight)

    async def get(self, key: str) -> CacheEntry:
        if key in self._store:
            return CacheEntry(data=self._store[key])

        try:
            data = await self._fetch(key)
        except Exception as exc:
            logger.warning("cache fetch failed key=%s error=%s", key, exc)
            return CacheEntry(error=exc)
        return CacheEntry(data=data)

    async def invalidate(self, key: str) -> None:
        """Revalidate ``key``: drop it and re-fetch if it was cached."""
        if key in self._running:
            self._generations[key] = self._generations.get(key, 0) + 1
        was_cached = self._store.pop(key, None) is not None
        logger.info("cache invalidated key=%s revalidate=%s", key, was_cached)
        if not was_cached:
            return
        try:
            await self._fetch(key)
        except Exception as exc:
            logger.warning("cache revalidation failed key=%s error=%s", key, exc)

    def clear(self) -> None:
        self._store.clear()

    async def _fetch(self, key: str) -> Any:
        generation = self._generations.get(key, 0)
        pending = self._inflight.get(key)
        if pending is not None and pending[0] == generation:
            return await asyncio.shield(pending[1])

        task = asyncio.ensure_future(self._fetcher(key))
        self._inflight[key] = (generation, task)
        self._running[key] = self._running.get(key, 0) + 1
        try:
            data = await asyncio.shield(task)
            if self._generations.get(key, 0) == generation:
                self._store[key] = data
            return data
        finally:
            if self._inflight.get(key, (None, None))[1] is task:
                del self._inflight[key]
            self._running[key] -= 1
            if not self._running[key]:
                # Nothing older can write back; the counter can restart at 0.
                del self._running[key]
                self._generations.pop(key, None)
