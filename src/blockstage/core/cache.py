"""In-memory entity data cache.

Entries move through ``absent -> pending -> ready``, or back to ``absent``
when a fetch fails so a later request can retry. At most one load runs per
key: concurrent callers for the same key await the same task.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from blockstage.core.section import FetchDescriptor
from blockstage.core.types import FetchStatus

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of one retrieval. Errors are values, never raised."""

    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CacheEntry:
    """Cached state for one key."""

    status: FetchStatus = FetchStatus.ABSENT
    data: Any = None
    error: str | None = None


class EntityCache:
    """Key-value store of resolved entity data with in-flight coalescing."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task[FetchResult]] = {}

    def __len__(self) -> int:
        return sum(1 for entry in self._entries.values() if entry.status is FetchStatus.READY)

    def __contains__(self, key: str) -> bool:
        return self.status(key) is FetchStatus.READY

    def get(self, key: str) -> CacheEntry:
        """Get the entry for a key (an absent entry if unknown)."""
        return self._entries.get(key) or CacheEntry()

    def status(self, key: str) -> FetchStatus:
        return self.get(key).status

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = CacheEntry(status=FetchStatus.READY, data=data)

    def mark_pending(self, key: str) -> None:
        entry = self.get(key)
        if entry.status is not FetchStatus.READY:
            self._entries[key] = CacheEntry(status=FetchStatus.PENDING, error=entry.error)

    def is_inflight(self, key: str) -> bool:
        return key in self._inflight

    def invalidate(self, key: str) -> None:
        """Drop a ready or failed entry; an in-flight load keeps running."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def populate(self, entries: Iterable[Any]) -> int:
        """Pre-populate the cache with build-time fetched data.

        Each entry is ``{"config": <fetch configuration>, "data": <value>}``.
        Entries without ``data``, or whose configuration doesn't yield a
        fetch descriptor, are skipped.

        Returns:
            Number of entries stored
        """
        stored = 0
        for entry in entries:
            if not isinstance(entry, Mapping) or entry.get("data") is None:
                continue
            descriptor = FetchDescriptor.from_config(entry.get("config"))
            if descriptor is None:
                continue
            self.set(descriptor.cache_key, entry.get("data"))
            stored += 1
        if stored:
            logger.debug(f"Pre-populated {stored} entity cache entries")
        return stored

    async def load(
        self,
        key: str,
        loader: Callable[[], Awaitable[FetchResult]],
    ) -> FetchResult:
        """Load data for a key, coalescing concurrent requests.

        A ready entry is returned without calling ``loader``. Otherwise the
        first caller starts ``loader`` and every caller awaits that same task.

        Args:
            key: Cache key
            loader: Coroutine factory performing the retrieval

        Returns:
            FetchResult shared by all callers of the same load
        """
        entry = self.get(key)
        if entry.status is FetchStatus.READY:
            return FetchResult(data=entry.data)

        task = self._inflight.get(key)
        if task is None:
            self.mark_pending(key)
            task = asyncio.create_task(self._run(key, loader))
            self._inflight[key] = task

        # One caller going away must not cancel the load for the others
        return await asyncio.shield(task)

    async def _run(
        self,
        key: str,
        loader: Callable[[], Awaitable[FetchResult]],
    ) -> FetchResult:
        try:
            try:
                result = await loader()
            except Exception as e:
                logger.warning(f"Entity load failed for {key}: {e}")
                result = FetchResult(error=str(e) or type(e).__name__)

            if result.ok:
                self.set(key, result.data)
            else:
                self._entries[key] = CacheEntry(status=FetchStatus.ABSENT, error=result.error)
            return result
        except asyncio.CancelledError:
            self._entries[key] = CacheEntry(status=FetchStatus.ABSENT)
            raise
        finally:
            self._inflight.pop(key, None)
