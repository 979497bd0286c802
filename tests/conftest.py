"""Shared test fixtures for the quiethn test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog
from fakes import FakeItemSource, make_job, make_story


@pytest.fixture()
def every_fourth_source() -> FakeItemSource:
    """100 ranked items where only IDs divisible by 4 are link stories."""
    items = [make_story(i) if i % 4 == 0 else make_job(i) for i in range(1, 101)]
    return FakeItemSource(items)


@pytest.fixture()
def all_stories_source() -> FakeItemSource:
    return FakeItemSource([make_story(i) for i in range(1, 61)])


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any structlog.configure() done by the server lifespan."""
    yield
    structlog.reset_defaults()
