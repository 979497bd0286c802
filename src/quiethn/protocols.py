"""Protocol interfaces for swappable components.

The builder, fetcher and routes reference these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight in-memory item sources
- Other feeds (e.g. "best" or "new" stories) to be plugged in without
  touching the ranking pipeline
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import timedelta

    from quiethn.models.items import DisplayItem, RawItem


class ItemSourceProtocol(Protocol):
    """Interface for the remote item-tracking API."""

    async def top_items(self) -> list[int]: ...

    async def get_item(self, item_id: int) -> RawItem: ...


class RendererProtocol(Protocol):
    """Interface for the page renderer."""

    def render(self, stories: Sequence[DisplayItem], elapsed: timedelta) -> str: ...
