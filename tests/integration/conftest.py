"""Integration test fixtures.

Provides a fully wired AppState over an in-memory item source, and a
respx router that stands in for the Hacker News API.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import httpx
import pytest
import respx
from fakes import FakeItemSource, make_job, make_story

from quiethn.builder import RankedListBuilder
from quiethn.cache import StoryCache
from quiethn.config import Settings
from quiethn.fetcher import StoryFetcher
from quiethn.renderer import HtmlRenderer
from quiethn.server import create_app
from quiethn.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from starlette.applications import Starlette

HN_BASE = "https://hacker-news.firebaseio.com/v0"


@pytest.fixture()
def settings() -> Settings:
    return Settings(stories={"count": 5}, cache={"strategy": "on_demand"})


@pytest.fixture()
def fake_source() -> FakeItemSource:
    items = [make_story(i) if i % 3 else make_job(i) for i in range(1, 31)]
    return FakeItemSource(items)


@pytest.fixture()
def app_state(settings: Settings, fake_source: FakeItemSource) -> AppState:
    builder = RankedListBuilder(fake_source, StoryFetcher(fake_source))
    cache = StoryCache(
        builder,
        expiration_seconds=settings.cache.expiration_seconds,
        strategy=settings.cache.strategy,
    )
    return AppState(settings=settings, cache=cache, renderer=HtmlRenderer())


@pytest.fixture()
def app(settings: Settings, app_state: AppState) -> Starlette:
    """Application with pre-wired state; the lifespan is not run."""
    application = create_app(settings)
    application.state.quiethn = app_state
    return application


@pytest.fixture()
async def client(app: Starlette) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://localhost"
    ) as http_client:
        yield http_client


def _hn_item(request: httpx.Request, item_id: str) -> httpx.Response:
    n = int(item_id)
    if n % 5 == 0:
        return httpx.Response(200, json={"id": n, "type": "job", "title": f"Job {n}"})
    if n == 7:
        return httpx.Response(200, json=None)
    return httpx.Response(
        200,
        json={
            "id": n,
            "type": "story",
            "title": f"Story {n}",
            "url": f"https://www.site{n}.com/a",
            "score": 100 - n,
            "by": "someone",
        },
    )


@pytest.fixture()
def hn_api() -> Iterator[respx.MockRouter]:
    """Hacker News API with 40 top items: every 5th is a job, item 7 is deleted."""
    with respx.mock(assert_all_called=False) as router:
        router.get(f"{HN_BASE}/topstories.json", name="top").mock(
            return_value=httpx.Response(200, json=list(range(1, 41)))
        )
        item_pattern = rf"{re.escape(HN_BASE)}/item/(?P<item_id>\d+)\.json$"
        router.get(url__regex=item_pattern, name="item").mock(side_effect=_hn_item)
        yield router
