"""Story classification.

Pure business logic. Decides which fetched items appear on the page.
No knowledge of the network, the cache, or the web layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

from quiethn.models.items import DisplayItem

if TYPE_CHECKING:
    from quiethn.models.items import RawItem

STORY_TYPE = "story"


def display_host(url: str) -> str:
    """Return the hostname shown next to a title: ``'www.example.com'`` → ``'example.com'``.

    Only one leading ``www.`` is removed. Unparseable URLs yield ``''``.
    """
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return ""  # e.g. an unterminated IPv6 literal
    return hostname.removeprefix("www.")


def is_story_link(item: RawItem) -> bool:
    """A story that links out. Ask HN, jobs, polls and comments do not qualify."""
    return item.type == STORY_TYPE and item.url != ""


def classify(item: RawItem) -> DisplayItem | None:
    """Return the displayable form of ``item``, or ``None`` if it does not qualify.

    Qualification depends only on kind and URL presence; a URL that fails to
    parse still qualifies, with an empty host.
    """
    if not is_story_link(item):
        return None
    return DisplayItem(**item.model_dump(), host=display_host(item.url))
