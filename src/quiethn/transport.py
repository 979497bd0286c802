"""HTTP transport: access logging middleware and the uvicorn runner."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog
import uvicorn

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

    from quiethn.config import Settings

log = structlog.get_logger()


class AccessLogMiddleware:
    """Pure ASGI middleware that logs one ``http_request`` event per request.

    uvicorn's own access log is disabled (``log_config=None``) so that every
    line goes through structlog with the configured renderer.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            log.info(
                "http_request",
                method=scope["method"],
                path=scope["path"],
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


def run_http_server(app: ASGIApp, settings: Settings) -> None:
    """Serve ``app`` with uvicorn on the configured host and port."""
    uvicorn.run(
        AccessLogMiddleware(app),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )
