from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    ITEM_UNAVAILABLE = "ITEM_UNAVAILABLE"
    INSUFFICIENT_STORIES = "INSUFFICIENT_STORIES"


class QuietHNError(Exception):
    """Base class for all expected failure conditions.

    Route handlers in server.py catch this and answer with a 503 plus the
    error envelope from ``to_dict()``. Per-item failures (``ItemUnavailable``)
    are the exception: the fetcher absorbs them and they never reach a route.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class SourceUnavailable(QuietHNError):
    """The top-ID listing could not be retrieved."""

    def __init__(self, message: str) -> None:
        super().__init__(
            code=ErrorCode.SOURCE_UNAVAILABLE,
            message=message,
            suggestion="Hacker News may be temporarily unreachable. Try again shortly.",
            recoverable=True,
        )


class ItemUnavailable(QuietHNError):
    """A single item could not be fetched or decoded."""

    def __init__(self, item_id: int, message: str) -> None:
        super().__init__(
            code=ErrorCode.ITEM_UNAVAILABLE,
            message=message,
            suggestion="The item will be skipped.",
            recoverable=True,
        )
        self.item_id = item_id


class InsufficientStories(QuietHNError):
    """The top-ID list ran out before enough qualifying stories were found."""

    def __init__(self, requested: int, found: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_STORIES,
            message=f"Only {found} of {requested} requested stories are available.",
            suggestion="Lower stories.count or enable stories.allow_partial.",
            recoverable=False,
        )
        self.requested = requested
        self.found = found
