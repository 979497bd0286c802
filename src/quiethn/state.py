"""Application state container.

AppState is created once at server startup (inside the Starlette lifespan
context manager) and reached by every route through ``request.app.state``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from quiethn.cache import StoryCache
    from quiethn.config import Settings
    from quiethn.protocols import RendererProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every route handler."""

    settings: Settings
    cache: StoryCache
    renderer: RendererProtocol
    http_client: httpx.AsyncClient | None = None
