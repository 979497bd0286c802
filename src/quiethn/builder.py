"""Ranked list builder.

Reads the top-ID feed once, then walks it in batches until enough qualifying
stories are collected. Each batch asks for 5/4 of what is still missing,
since jobs, polls and self posts in the feed get filtered out; if the filter
turns out harsher than that, the loop simply asks again.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import structlog

from quiethn.errors import InsufficientStories

if TYPE_CHECKING:
    from quiethn.fetcher import StoryFetcher
    from quiethn.models.items import DisplayItem
    from quiethn.protocols import ItemSourceProtocol

log = structlog.get_logger()

OVERFETCH_NUMERATOR = 5
OVERFETCH_DENOMINATOR = 4


def batch_size(missing: int) -> int:
    """``ceil(missing * 5 / 4)``, computed in integers."""
    return math.ceil(missing * OVERFETCH_NUMERATOR / OVERFETCH_DENOMINATOR)


class RankedListBuilder:
    def __init__(
        self,
        source: ItemSourceProtocol,
        fetcher: StoryFetcher,
        *,
        allow_partial: bool = False,
    ) -> None:
        self._source = source
        self._fetcher = fetcher
        self._allow_partial = allow_partial

    async def build(self, target_count: int) -> list[DisplayItem]:
        """Return exactly ``target_count`` qualifying stories in ranking order.

        Raises SourceUnavailable if the top-ID feed cannot be read, and
        InsufficientStories if the feed is exhausted first (unless the builder
        was created with ``allow_partial=True``, in which case the short list
        is returned).
        """
        if target_count <= 0:
            raise ValueError(f"target_count must be positive, got {target_count}")

        ids = await self._source.top_items()

        stories: list[DisplayItem] = []
        cursor = 0
        batches = 0
        while len(stories) < target_count:
            if cursor >= len(ids):
                if self._allow_partial:
                    log.warning(
                        "build_short_list", requested=target_count, found=len(stories)
                    )
                    return stories
                raise InsufficientStories(requested=target_count, found=len(stories))

            batch = ids[cursor : cursor + batch_size(target_count - len(stories))]
            stories.extend(await self._fetcher.fetch(batch))
            cursor += len(batch)
            batches += 1

        log.info(
            "build_complete",
            requested=target_count,
            batches=batches,
            ids_consumed=cursor,
            ids_available=len(ids),
        )
        return stories[:target_count]
