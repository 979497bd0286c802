from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict

HN_DISCUSSION_URL = "https://news.ycombinator.com/item?id={id}"
LINK_SCHEMES = frozenset({"http", "https"})


class RawItem(BaseModel):
    """A single item as returned by the Hacker News item endpoint.

    Only the fields the service reads are declared; anything else in the
    payload (kids, parent, text, ...) is ignored.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    type: str = ""  # "story" | "comment" | "job" | "poll" | "pollopt"
    url: str = ""  # Absent for Ask HN and other self posts
    title: str = ""
    score: int = 0
    by: str = ""
    time: int | None = None  # Unix seconds
    descendants: int | None = None  # Comment count, stories and polls only


class DisplayItem(RawItem):
    """A qualifying story plus the host shown next to its title."""

    host: str = ""

    @property
    def discussion_url(self) -> str:
        return HN_DISCUSSION_URL.format(id=self.id)

    @property
    def link_url(self) -> str:
        """The story URL if it is an http(s) link, else the discussion page."""
        try:
            scheme = urlparse(self.url).scheme.lower()
        except ValueError:
            return self.discussion_url
        return self.url if scheme in LINK_SCHEMES else self.discussion_url
