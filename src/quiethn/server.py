"""Web server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the Starlette lifespan context manager
- Register routes
- Start the HTTP transport
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.responses import HTMLResponse, JSONResponse, PlainTextResponse
from starlette.routing import Route

from quiethn import __version__
from quiethn.builder import RankedListBuilder
from quiethn.cache import StoryCache
from quiethn.config import Settings
from quiethn.errors import QuietHNError
from quiethn.fetcher import StoryFetcher
from quiethn.renderer import HtmlRenderer
from quiethn.schedulers import run_cache_refresh_scheduler
from quiethn.source import HackerNewsSource, build_http_client
from quiethn.state import AppState
from quiethn.transport import run_http_server

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request
    from starlette.responses import Response

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def build_state(settings: Settings) -> AppState:
    """Wire the source, fetcher, builder, cache and renderer together."""
    http_client = build_http_client(settings.hackernews)
    source = HackerNewsSource(http_client)
    fetcher = StoryFetcher(
        source,
        item_timeout=settings.hackernews.item_timeout_seconds,
        max_concurrency=settings.hackernews.max_concurrency,
    )
    builder = RankedListBuilder(
        source, fetcher, allow_partial=settings.stories.allow_partial
    )
    cache = StoryCache(
        builder,
        expiration_seconds=settings.cache.expiration_seconds,
        strategy=settings.cache.strategy,
    )
    return AppState(
        settings=settings,
        cache=cache,
        renderer=HtmlRenderer(),
        http_client=http_client,
    )


def create_app(settings: Settings | None = None) -> Starlette:
    """Build the Starlette application. Settings are loaded at startup if not given."""

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        """Create and tear down all shared resources for the server's lifetime."""
        resolved = settings or Settings()
        _setup_logging(resolved)

        log.info(
            "server_starting",
            version=__version__,
            strategy=resolved.cache.strategy,
            stories=resolved.stories.count,
            host=resolved.server.host,
            port=resolved.server.port,
        )

        state = build_state(resolved)
        app.state.quiethn = state

        refresh_task: asyncio.Task[None] | None = None
        if resolved.cache.strategy == "periodic":
            refresh_task = asyncio.create_task(run_cache_refresh_scheduler(state))

        log.info("server_started", version=__version__)

        try:
            yield
        finally:
            if refresh_task is not None:
                refresh_task.cancel()
                with suppress(asyncio.CancelledError):
                    await refresh_task
            if state.http_client is not None:
                await state.http_client.aclose()
            log.info("server_stopping")

    return Starlette(
        routes=[
            Route("/", index, methods=["GET"]),
            Route("/stories.json", stories_json, methods=["GET"]),
            Route("/healthz", healthz, methods=["GET"]),
        ],
        lifespan=lifespan,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _log_request_failure(route: str, exc: QuietHNError) -> None:
    log.warning(
        "request_failed",
        route=route,
        code=exc.code,
        message=exc.message,
        recoverable=exc.recoverable,
    )


async def index(request: Request) -> Response:
    """Render the front page."""
    state: AppState = request.app.state.quiethn
    start = time.perf_counter()
    try:
        stories = await state.cache.get(state.settings.stories.count)
    except QuietHNError as exc:
        _log_request_failure("index", exc)
        return PlainTextResponse("Failed to load stories", status_code=503)
    except Exception:
        log.error("request_unexpected_error", route="index", exc_info=True)
        raise

    elapsed = timedelta(seconds=time.perf_counter() - start)
    return HTMLResponse(state.renderer.render(stories, elapsed))


async def stories_json(request: Request) -> Response:
    """Return the ranked list as JSON."""
    state: AppState = request.app.state.quiethn
    start = time.perf_counter()
    try:
        stories = await state.cache.get(state.settings.stories.count)
    except QuietHNError as exc:
        _log_request_failure("stories_json", exc)
        return JSONResponse(exc.to_dict(), status_code=503)
    except Exception:
        log.error("request_unexpected_error", route="stories_json", exc_info=True)
        raise

    return JSONResponse(
        {
            "stories": [
                {**story.model_dump(mode="json"), "discussion_url": story.discussion_url}
                for story in stories
            ],
            "elapsed_ms": round((time.perf_counter() - start) * 1000, 2),
        }
    )


async def healthz(request: Request) -> Response:
    state: AppState = request.app.state.quiethn
    entry = state.cache.snapshot()
    return JSONResponse(
        {
            "status": "ok",
            "version": __version__,
            "strategy": state.cache.strategy,
            "cached_stories": len(entry.stories),
            "fresh": state.cache.is_active(),
            "built_at": entry.built_at.isoformat() if entry.built_at else None,
        }
    )


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    # Logging is configured once, by the lifespan
    settings = Settings()
    run_http_server(create_app(settings), settings)


if __name__ == "__main__":
    main()
