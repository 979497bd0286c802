"""In-memory story cache with a wall-clock expiry.

Two refresh strategies share this class:

- ``on_demand``: ``get`` serves the stored list while it is fresh and rebuilds
  synchronously once it goes stale. Rebuilds are single-flight: concurrent
  stale callers queue on the build lock and re-check freshness once they hold
  it, so a burst of requests triggers one upstream build.
- ``periodic``: a background task (see schedulers.py) calls ``refresh`` on a
  fixed interval and ``get`` always returns the last completed snapshot,
  whatever its age. A request the snapshot cannot cover (none built yet, or
  built for fewer stories) falls back to a synchronous build.

The entry is swapped wholesale after a successful build. A failed build
raises without touching it, so readers never observe a partial list.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

import structlog

from quiethn.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from quiethn.builder import RankedListBuilder
    from quiethn.models.items import DisplayItem

log = structlog.get_logger()

RefreshStrategy = Literal["on_demand", "periodic"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StoryCache:
    """Owns the current CacheEntry. Created once at startup."""

    def __init__(
        self,
        builder: RankedListBuilder,
        *,
        expiration_seconds: float,
        strategy: RefreshStrategy = "on_demand",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._builder = builder
        self._expiration = timedelta(seconds=expiration_seconds)
        self._strategy = strategy
        self._clock = clock
        self._build_lock = asyncio.Lock()
        # Empty and already expired: the first get() always builds
        self._entry = CacheEntry(deadline=clock())

    @property
    def strategy(self) -> RefreshStrategy:
        return self._strategy

    def is_active(self) -> bool:
        """True while the stored entry is fresh."""
        return self._clock() < self._entry.deadline

    def snapshot(self) -> CacheEntry:
        return self._entry

    async def get(self, target_count: int) -> list[DisplayItem]:
        """Return ``target_count`` ranked stories, rebuilding if the strategy calls for it."""
        if (
            self._strategy == "periodic"
            and self._entry.built_at is not None
            and self._entry.requested >= target_count
        ):
            return list(self._entry.stories[:target_count])

        if self._covers(target_count):
            log.debug("cache_hit", stories=len(self._entry.stories))
            return list(self._entry.stories[:target_count])

        async with self._build_lock:
            # Another caller may have rebuilt while this one waited
            if self._covers(target_count):
                log.debug("cache_hit", stories=len(self._entry.stories), waited=True)
                return list(self._entry.stories[:target_count])

            log.info("cache_miss", strategy=self._strategy, requested=target_count)
            entry = await self._rebuild(target_count)
        return list(entry.stories)

    async def refresh(self, target_count: int) -> CacheEntry:
        """Build a new list and store it, regardless of the current entry's freshness."""
        async with self._build_lock:
            return await self._rebuild(target_count)

    def _covers(self, target_count: int) -> bool:
        return self.is_active() and self._entry.requested >= target_count

    async def _rebuild(self, target_count: int) -> CacheEntry:
        started = self._clock()
        stories = await self._builder.build(target_count)

        now = self._clock()
        self._entry = CacheEntry(
            stories=tuple(stories),
            requested=target_count,
            deadline=now + self._expiration,
            built_at=now,
        )
        log.info(
            "cache_rebuild_complete",
            stories=len(stories),
            duration_ms=round((now - started).total_seconds() * 1000, 1),
        )
        return self._entry
