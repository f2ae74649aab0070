"""
Key-indexed cache of server resources.

Entries are keyed by a tuple whose first element is the resource category,
e.g. ``("orders",)`` or ``("clients", "c1")``. Reads are served from the
cache until the category is invalidated; concurrent reads of the same key
share one in-flight fetch.

Each fetch bumps the entry's version. A completed fetch is applied only if
its version is still current, so a slow response can never overwrite the
result of a newer request or resurrect data that was invalidated while it
was in flight.
"""
import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

CacheKey = tuple[str, ...]
Fetcher = Callable[[], Awaitable[Any]]


def make_key(category: str, *params: object) -> CacheKey:
    """Build a cache key from a category and optional id/filter parts."""
    return (category, *(str(p) for p in params))


@dataclass
class CacheEntry:
    """State of one cached resource."""

    key: CacheKey
    data: Any = None
    error: Exception | None = None
    has_data: bool = False
    is_loading: bool = False
    is_stale: bool = False
    version: int = 0
    updated_at: float | None = None
    task: "asyncio.Task[Any] | None" = field(default=None, repr=False)

    @property
    def category(self) -> str:
        return self.key[0]

    @property
    def is_fresh(self) -> bool:
        """Servable without a fetch."""
        return self.has_data and not self.is_stale and self.error is None


def _mark_retrieved(task: "asyncio.Task[Any]") -> None:
    # Callers may have stopped awaiting a shared fetch; read the exception so
    # asyncio does not report it as never retrieved.
    if not task.cancelled():
        task.exception()


class QueryCache:
    """
    Cache with request de-duplication and invalidation.

    Failed fetches store the error on the entry and re-raise it; there is no
    automatic retry. Calling ``get`` again is the retry.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}

    def peek(self, key: CacheKey) -> CacheEntry | None:
        """Return the entry for ``key`` without fetching."""
        return self._entries.get(key)

    def entries(self, category: str | None = None) -> list[CacheEntry]:
        """All entries, or those under ``category``."""
        return [
            entry for entry in self._entries.values()
            if category is None or entry.category == category
        ]

    async def get(self, key: CacheKey, fetcher: Fetcher) -> Any:
        """
        Return cached data for ``key``, fetching it when needed.

        Args:
            key: Cache key; ``key[0]`` is the category.
            fetcher: Coroutine function producing fresh data.

        Raises:
            Exception: Whatever the fetch raised (ApiError for API fetchers).
        """
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = CacheEntry(key=key)

        if entry.is_fresh:
            logger.debug("cache_hit key=%s", key)
            return entry.data

        if entry.task is not None and not entry.task.done():
            logger.debug("cache_join_inflight key=%s version=%s", key, entry.version)
            return await self._await(entry, entry.task)

        return await self._await(entry, self._start_fetch(entry, fetcher))

    def _start_fetch(self, entry: CacheEntry, fetcher: Fetcher) -> "asyncio.Task[Any]":
        entry.version += 1
        entry.is_loading = True
        logger.debug("cache_fetch key=%s version=%s", entry.key, entry.version)
        task = asyncio.create_task(self._run_fetch(entry, entry.version, fetcher))
        task.add_done_callback(_mark_retrieved)
        entry.task = task
        return task

    async def _run_fetch(self, entry: CacheEntry, version: int, fetcher: Fetcher) -> Any:
        try:
            data = await fetcher()
        except Exception as e:
            if entry.version == version:
                entry.error = e
                entry.is_loading = False
                entry.task = None
                logger.info("cache_fetch_failed key=%s error=%s", entry.key, e)
            raise

        if entry.version != version:
            logger.debug(
                "cache_discard_outdated key=%s version=%s current=%s",
                entry.key, version, entry.version,
            )
            return data

        entry.data = data
        entry.has_data = True
        entry.error = None
        entry.is_stale = False
        entry.is_loading = False
        entry.updated_at = time.monotonic()
        entry.task = None
        return data

    async def _await(self, entry: CacheEntry, task: "asyncio.Task[Any]") -> Any:
        # Shielded so one caller going away does not cancel a fetch others share
        try:
            data = await asyncio.shield(task)
        except Exception:
            newer = entry.task
            if newer is not None and newer is not task:
                return await self._await(entry, newer)
            if entry.is_fresh:
                # Failed after being superseded by a fetch that succeeded
                return entry.data
            raise
        newer = entry.task
        if newer is not None and newer is not task:
            # Superseded while in flight; hand back the newest result instead
            return await self._await(entry, newer)
        if entry.is_fresh:
            return entry.data
        return data

    def invalidate(self, category: str) -> int:
        """
        Mark every entry under ``category`` stale.

        In-flight fetches for those entries are superseded: their results are
        discarded and the next ``get`` starts a new fetch.

        Returns:
            Number of entries invalidated.
        """
        count = 0
        for entry in self.entries(category):
            entry.is_stale = True
            entry.version += 1
            entry.is_loading = False
            entry.task = None
            count += 1
        logger.debug("cache_invalidate category=%s entries=%s", category, count)
        return count

    def clear(self) -> None:
        """Drop every entry, superseding in-flight fetches."""
        for entry in self._entries.values():
            entry.version += 1
            entry.task = None
        self._entries.clear()
        logger.debug("cache_cleared")
