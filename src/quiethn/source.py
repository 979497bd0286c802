"""Hacker News item source.

All network I/O against the Hacker News Firebase API goes through a single
HackerNewsSource instance. The source receives an httpx.AsyncClient via
constructor injection and the lifespan owns the client lifecycle.

Transport, HTTP and decoding failures are translated into ``SourceUnavailable``
(top-ID listing) and ``ItemUnavailable`` (single item) at this boundary, so
callers only ever see the service's own error types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from quiethn import __version__
from quiethn.errors import ItemUnavailable, SourceUnavailable
from quiethn.models.items import RawItem

if TYPE_CHECKING:
    from quiethn.config import HackerNewsSettings

log = structlog.get_logger()

_TOP_IDS = TypeAdapter(list[int])


def build_http_client(settings: HackerNewsSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        base_url=settings.base_url,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"User-Agent": f"quiethn/{__version__}"},
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_concurrency,
        ),
    )


class HackerNewsSource:
    """Reads the top-stories feed and individual items from Hacker News."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def top_items(self) -> list[int]:
        """Return the current top-ranked item IDs, best first.

        Raises SourceUnavailable on network errors, non-2xx responses and
        payloads that are not a list of integers.
        """
        try:
            response = await self._client.get("/topstories.json")
            response.raise_for_status()
            ids = _TOP_IDS.validate_json(response.content)
        except httpx.HTTPStatusError as exc:
            log.warning("top_items_failed", status_code=exc.response.status_code)
            raise SourceUnavailable(
                f"HTTP {exc.response.status_code} fetching top stories"
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("top_items_failed", error=str(exc))
            raise SourceUnavailable(f"Network error fetching top stories: {exc}") from exc
        except ValidationError as exc:
            log.warning("top_items_failed", error="malformed_payload")
            raise SourceUnavailable("Malformed top stories payload") from exc

        log.debug("top_items_fetched", count=len(ids))
        return ids

    async def get_item(self, item_id: int) -> RawItem:
        """Fetch a single item by ID.

        Raises ItemUnavailable on network errors, non-2xx responses, malformed
        payloads and ``null`` bodies (deleted or unknown IDs).
        """
        try:
            response = await self._client.get(f"/item/{item_id}.json")
            response.raise_for_status()
            payload = response.json()
            if payload is None:
                raise ItemUnavailable(item_id, f"Item {item_id} does not exist")
            return RawItem.model_validate(payload)
        except ItemUnavailable:
            raise
        except httpx.HTTPStatusError as exc:
            raise ItemUnavailable(
                item_id, f"HTTP {exc.response.status_code} fetching item {item_id}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ItemUnavailable(item_id, f"Network error fetching item {item_id}: {exc}") from exc
        except ValueError as exc:
            # json.JSONDecodeError and pydantic.ValidationError
            raise ItemUnavailable(item_id, f"Malformed payload for item {item_id}") from exc
