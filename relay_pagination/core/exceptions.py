"""Pagination exceptions.

Custom exceptions for the pagination engine, its cursor codecs and
the finder adapters. They separate programmer errors (bad configuration)
from request rejections and from stale or tampered cursors, so callers can
render a "stale link" message distinct from a generic failure.

Store errors (SQLAlchemy errors, asyncio.CancelledError) are never wrapped
and propagate to the caller unchanged.
"""
from __future__ import annotations

from typing import Any, Literal

Boundary = Literal["after", "before"]


class PaginationError(Exception):
    """Base exception for pagination operations.

    Attributes:
        message: Error description
        details: Additional context about the error (field names, limits)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize pagination error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class PaginationConfigError(PaginationError):
    """Invalid paginator configuration.

    Raised at construction time (limits, default ordering, missing
    apply-cursors callable). This indicates programmer error and should
    abort startup rather than be handled per request.
    """


class InvalidPaginationRequestError(PaginationError):
    """Pagination request rejected before any fetch was performed.

    Raised for conflicting first/last, negative or oversized limits,
    duplicate order fields and identical after/before cursors.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize invalid request error.

        Args:
            message: Error description
            field: Name of the offending request field (if applicable)
            details: Additional context about the error
        """
        self.field = field
        merged = {"field": field} if field else {}
        merged.update(details or {})
        super().__init__(message, details=merged)


class InvalidCursorError(PaginationError):
    """Malformed, tampered, mismatched or undecryptable cursor.

    Messages never include the cursor content.

    Attributes:
        boundary: Which request cursor failed ("after" or "before"), if known
    """

    def __init__(
        self,
        message: str = "invalid cursor",
        boundary: Boundary | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize invalid cursor error.

        Args:
            message: Error description
            boundary: Which request cursor failed to decode
            details: Additional context about the error
        """
        self.boundary = boundary
        merged = {"boundary": boundary} if boundary else {}
        merged.update(details or {})
        super().__init__(message, details=merged)

    def with_boundary(self, boundary: Boundary) -> InvalidCursorError:
        """Return a copy of this error attributed to a request boundary."""
        if self.boundary is not None:
            return self
        details = {k: v for k, v in self.details.items() if k != "boundary"}
        return InvalidCursorError(
            f"invalid {boundary} cursor: {self.message}",
            boundary=boundary,
            details=details,
        )


class CursorEncodeError(PaginationError):
    """A node could not be projected onto the cursor key fields."""


__all__ = [
    "Boundary",
    "CursorEncodeError",
    "InvalidCursorError",
    "InvalidPaginationRequestError",
    "PaginationConfigError",
    "PaginationError",
]
