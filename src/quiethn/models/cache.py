from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from quiethn.models.items import DisplayItem


class CacheEntry(BaseModel):
    """The ranked list currently served, replaced wholesale on every refresh."""

    model_config = ConfigDict(frozen=True)

    stories: tuple[DisplayItem, ...] = ()
    requested: int = 0  # Count the list was built for; len(stories) may be lower in partial mode
    deadline: datetime
    built_at: datetime | None = None  # None until the first successful build
