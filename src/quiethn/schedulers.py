"""Background scheduler coroutine for the periodic cache refresh strategy."""

from __future__ import annotations

import asyncio
from time import monotonic
from typing import TYPE_CHECKING

import structlog

from quiethn.errors import QuietHNError

if TYPE_CHECKING:
    from quiethn.state import AppState

log = structlog.get_logger()


async def run_cache_refresh_scheduler(state: AppState) -> None:
    """Rebuild the story cache every ``cache.refresh_interval_seconds``.

    Refreshes start on a fixed grid measured from the first one, so build time
    does not stretch the period. A build that overruns its slot is followed
    immediately by the next one. Runs for the lifetime of the server and is
    cancelled on shutdown. A failed build is logged and the previous snapshot
    keeps being served until the next tick succeeds.
    """
    interval = state.settings.cache.refresh_interval_seconds
    count = state.settings.stories.count
    next_tick = monotonic()

    while True:
        try:
            entry = await state.cache.refresh(count)
            log.debug("cache_refresh_tick", stories=len(entry.stories))
        except QuietHNError as exc:
            log.warning("cache_refresh_failed", code=exc.code, message=exc.message)
        except Exception:
            log.error("cache_refresh_scheduler_error", exc_info=True)

        now = monotonic()
        next_tick = max(next_tick + interval, now)
        await asyncio.sleep(next_tick - now)
