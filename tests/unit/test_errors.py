"""Unit tests for quiethn.errors."""

from __future__ import annotations

from quiethn.errors import (
    ErrorCode,
    InsufficientStories,
    ItemUnavailable,
    QuietHNError,
    SourceUnavailable,
)


class TestErrorEnvelope:
    def test_to_dict(self) -> None:
        err = SourceUnavailable("HTTP 503 fetching top stories")
        assert err.to_dict() == {
            "error": {
                "code": ErrorCode.SOURCE_UNAVAILABLE,
                "message": "HTTP 503 fetching top stories",
                "suggestion": err.suggestion,
                "recoverable": True,
            }
        }

    def test_all_errors_share_base(self) -> None:
        for err in (
            SourceUnavailable("x"),
            ItemUnavailable(1, "x"),
            InsufficientStories(requested=30, found=2),
        ):
            assert isinstance(err, QuietHNError)

    def test_insufficient_stories_message(self) -> None:
        err = InsufficientStories(requested=30, found=2)
        assert str(err) == "Only 2 of 30 requested stories are available."
        assert err.recoverable is False
