from __future__ import annotations

from quiethn.models.cache import CacheEntry
from quiethn.models.items import DisplayItem, RawItem

__all__ = [
    # items
    "RawItem",
    "DisplayItem",
    # cache
    "CacheEntry",
]
