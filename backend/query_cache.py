#file: backend/query_cache.py

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

import pytz
from pydantic import BaseModel, ConfigDict

Fetcher = Callable[[], Awaitable[Any]]
QueryKey = Tuple[Hashable, ...]


def default_retry_delay(attempt: int) -> int:
    """Exponential backoff in milliseconds, capped at 30 s."""
    return min(1000 * 2 ** attempt, 30000)


class QueryResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: Any = None
    error: Optional[str] = None
    is_stale: bool = False
    updated_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CacheEntry:
    last_access: float
    gc_time: float
    data: Any = None
    error: Optional[str] = None
    updated_at: Optional[float] = None
    updated_wall: Optional[datetime] = None
    in_flight: Optional[asyncio.Task] = field(default=None, repr=False)

    def result(self, stale: bool = False) -> QueryResult:
        return QueryResult(data=self.data, error=self.error, is_stale=stale, updated_at=self.updated_wall)


class QueryCache:
    """
    Keyed cache for async fetches.

    Concurrent callers of one key share a single in-flight fetch, fresh values
    are served without refetching, failures are retried with exponential
    backoff and fall back to the last good value. Entries nobody asked for
    within their gc window are dropped; watched keys refetch on an interval.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.clock = clock
        self.sleep = sleep
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._watchers: Dict[QueryKey, asyncio.Task] = {}

    def __contains__(self, key) -> bool:
        return tuple(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def fetch(self, key, fn: Fetcher, stale_time: float = 0, gc_time: float = 300,
                    retry: int = 2, retry_delay: Callable[[int], int] = default_retry_delay) -> QueryResult:
        key = tuple(key)
        self.collect_garbage()
        now = self.clock()

        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = CacheEntry(last_access=now, gc_time=gc_time)
        entry.last_access = now
        entry.gc_time = gc_time

        if entry.error is None and entry.updated_at is not None and now - entry.updated_at < stale_time:
            return entry.result()

        if entry.in_flight is None:
            entry.in_flight = asyncio.ensure_future(self._run(key, entry, fn, retry, retry_delay))
        # shield: one caller giving up must not cancel the fetch for the others
        return await asyncio.shield(entry.in_flight)

    async def _run(self, key: QueryKey, entry: CacheEntry, fn: Fetcher, retry: int,
                   retry_delay: Callable[[int], int]) -> QueryResult:
        try:
            for attempt in range(retry + 1):
                try:
                    data = await fn()
                except Exception as e:
                    if attempt < retry:
                        delay = retry_delay(attempt)
                        logging.warning(f"Query {key} failed ({e}), retrying in {delay} ms")
                        await self.sleep(delay / 1000)
                        continue
                    logging.error(f"Query {key} failed after {retry + 1} attempts: {e}")
                    entry.error = str(e) or e.__class__.__name__
                    return entry.result(stale=entry.updated_at is not None)

                entry.data = data
                entry.error = None
                entry.updated_at = self.clock()
                entry.updated_wall = datetime.now(pytz.utc)
                return entry.result()
        finally:
            entry.in_flight = None

    def peek(self, key) -> Any:
        """Last good value for `key` without fetching, None when nothing is cached."""
        entry = self._entries.get(tuple(key))
        return entry.data if entry is not None else None

    def invalidate(self, key) -> None:
        entry = self._entries.get(tuple(key))
        if entry is not None:
            entry.updated_at = None

    def collect_garbage(self) -> int:
        now = self.clock()
        expired = [
            key for key, entry in self._entries.items()
            if entry.in_flight is None and key not in self._watchers and now - entry.last_access > entry.gc_time
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def watch(self, key, fn: Fetcher, interval: float, **options) -> asyncio.Task:
        """Refetch `key` every `interval` seconds until unwatched."""
        key = tuple(key)
        self.unwatch(key)

        async def loop():
            while True:
                await self.fetch(key, fn, **options)
                await self.sleep(interval)

        task = self._watchers[key] = asyncio.ensure_future(loop())
        return task

    def unwatch(self, key) -> None:
        task = self._watchers.pop(tuple(key), None)
        if task is not None:
            task.cancel()

    async def close(self) -> None:
        tasks = list(self._watchers.values())
        self._watchers.clear()
        tasks += [entry.in_flight for entry in self._entries.values() if entry.in_flight is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
