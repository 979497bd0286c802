"""Concurrent story fetcher.

Fans out one task per item ID inside a TaskGroup, classifies each item as it
arrives, and joins all of them before returning. Results are tagged with
their position in the input so the output follows ranking order, not completion order.

Per-item failures (``ItemUnavailable``, timeouts) and non-qualifying items are
both "excluded": dropped from the output and never raised to the caller. Any other
exception cancels the rest of the batch and surfaces as an ExceptionGroup.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, NamedTuple

import structlog

from quiethn.classifier import classify
from quiethn.errors import ItemUnavailable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from quiethn.models.items import DisplayItem
    from quiethn.protocols import ItemSourceProtocol

log = structlog.get_logger()


class FetchResult(NamedTuple):
    index: int
    story: DisplayItem | None  # None means excluded


class StoryFetcher:
    """Fetches a batch of item IDs concurrently and keeps the qualifying stories."""

    def __init__(
        self,
        source: ItemSourceProtocol,
        *,
        item_timeout: float = 5.0,
        max_concurrency: int = 50,
    ) -> None:
        self._source = source
        self._item_timeout = item_timeout
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def fetch(self, ids: Sequence[int]) -> list[DisplayItem]:
        """Return the qualifying stories among ``ids``, in input order."""
        if not ids:
            return []

        # An unexpected error in one worker cancels and joins the rest before it escapes
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(self._fetch_one(index, item_id))
                for index, item_id in enumerate(ids)
            ]
        results = [task.result() for task in tasks]

        kept = sorted((r for r in results if r.story is not None), key=lambda r: r.index)
        log.debug("batch_fetched", requested=len(ids), kept=len(kept))
        return [r.story for r in kept if r.story is not None]

    async def _fetch_one(self, index: int, item_id: int) -> FetchResult:
        async with self._semaphore:
            try:
                async with asyncio.timeout(self._item_timeout):
                    item = await self._source.get_item(item_id)
            except ItemUnavailable as exc:
                log.debug("item_excluded", item_id=item_id, reason="unavailable", error=exc.message)
                return FetchResult(index, None)
            except TimeoutError:
                log.debug("item_excluded", item_id=item_id, reason="timeout")
                return FetchResult(index, None)

        story = classify(item)
        if story is None:
            log.debug("item_excluded", item_id=item_id, reason="not_a_story", type=item.type)
        return FetchResult(index, story)
