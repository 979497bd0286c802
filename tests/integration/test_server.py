"""Integration tests for the HTTP routes in server.py.

Routes are exercised in-process through httpx's ASGI transport against an
AppState wired over the in-memory FakeItemSource.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from quiethn.errors import SourceUnavailable

if TYPE_CHECKING:
    import httpx
    from fakes import FakeItemSource

EXPECTED_IDS = [1, 2, 4, 5, 7]  # Multiples of 3 are jobs


class TestIndex:
    async def test_renders_ranked_stories(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        body = response.text
        positions = [body.index(f"Story {i}<") for i in EXPECTED_IDS]
        assert positions == sorted(positions)
        assert "Job 3" not in body
        assert "Story 8<" not in body
        assert "rendered in" in body

    async def test_repeated_requests_hit_cache(
        self, client: httpx.AsyncClient, fake_source: FakeItemSource
    ) -> None:
        for _ in range(3):
            assert (await client.get("/")).status_code == 200
        assert fake_source.top_calls == 1

    async def test_source_unavailable_is_503_without_partial_page(
        self, client: httpx.AsyncClient, fake_source: FakeItemSource
    ) -> None:
        fake_source.top_error = SourceUnavailable("down")
        response = await client.get("/")
        assert response.status_code == 503
        assert response.text == "Failed to load stories"


class TestStoriesJson:
    async def test_returns_stories(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/stories.json")
        assert response.status_code == 200
        payload = response.json()
        assert [s["id"] for s in payload["stories"]] == EXPECTED_IDS
        first = payload["stories"][0]
        assert first["host"] == "example1.com"
        assert first["discussion_url"] == "https://news.ycombinator.com/item?id=1"
        assert payload["elapsed_ms"] >= 0

    async def test_source_unavailable_envelope(
        self, client: httpx.AsyncClient, fake_source: FakeItemSource
    ) -> None:
        fake_source.top_error = SourceUnavailable("down")
        response = await client.get("/stories.json")
        assert response.status_code == 503
        error = response.json()["error"]
        assert error["code"] == "SOURCE_UNAVAILABLE"
        assert error["recoverable"] is True

    async def test_insufficient_stories_envelope(
        self, client: httpx.AsyncClient, fake_source: FakeItemSource
    ) -> None:
        fake_source.top = [3, 6, 1, 9]
        response = await client.get("/stories.json")
        assert response.status_code == 503
        error = response.json()["error"]
        assert error["code"] == "INSUFFICIENT_STORIES"
        assert error["recoverable"] is False


class TestHealthz:
    async def test_reports_cache_state(self, client: httpx.AsyncClient) -> None:
        before = (await client.get("/healthz")).json()
        assert before["status"] == "ok"
        assert before["cached_stories"] == 0
        assert before["fresh"] is False
        assert before["built_at"] is None
        assert before["strategy"] == "on_demand"

        await client.get("/")

        after = (await client.get("/healthz")).json()
        assert after["cached_stories"] == 5
        assert after["fresh"] is True
        assert after["built_at"] is not None


async def test_unknown_route_404(client: httpx.AsyncClient) -> None:
    assert (await client.get("/nope")).status_code == 404
