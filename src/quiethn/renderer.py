"""HTML renderer using Jinja2 templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from jinja2 import Environment, PackageLoader, select_autoescape

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import timedelta

    from quiethn.models.items import DisplayItem

log = structlog.get_logger()


class HtmlRenderer:
    """Renders the front page from ``templates/index.html``.

    Auto-escaping is enabled: titles and URLs come straight from user
    submissions on Hacker News.
    """

    def __init__(self, template_name: str = "index.html") -> None:
        self._env = Environment(
            loader=PackageLoader("quiethn", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._template = self._env.get_template(template_name)

    def render(self, stories: Sequence[DisplayItem], elapsed: timedelta) -> str:
        html = self._template.render(
            stories=stories,
            elapsed_ms=round(elapsed.total_seconds() * 1000, 2),
        )
        log.debug("page_rendered", stories=len(stories), size=len(html))
        return html
