"""Pagination request and response schemas.

This module provides two groups of types:

1. Public schemas (pydantic, GraphQL Relay specification):
   - PaginateRequest with first/last/after/before and optional ordering
   - Connection with edges and PageInfo
   - CursorPage, a simpler REST projection of a Connection

2. Internal contract between the Paginator and its apply-cursors callable:
   - ApplyCursorsRequest: the resolved range to fetch
   - ApplyCursorsResponse: fetched edges with lazy cursors plus boundary facts

Edges produced by adapters carry their cursor as a thunk (LazyEdge), so
cursor transforms can wrap it before the Paginator finally reads it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class OrderBy(BaseModel):
    """One ordering term of a total order over records.

    Attributes:
        field: Name of the record field to order by
        desc: Whether the field is ordered descending
    """

    field: str = Field(description="Field name to order by")
    desc: bool = Field(default=False, description="Descending order")

    model_config = {"frozen": True}


class PaginateRequest(BaseModel):
    """Relay-style pagination request.

    Values are validated by the Paginator rather than by pydantic
    constraints, so rejections carry pagination-specific messages.

    Attributes:
        first: Number of items to return from the start (forward)
        last: Number of items to return from the end (backward)
        after: Opaque cursor; only items after it are returned
        before: Opaque cursor; only items before it are returned
        order_bys: Ordering overriding the paginator default
    """

    first: int | None = Field(default=None, description="Items from the start")
    last: int | None = Field(default=None, description="Items from the end")
    after: str | None = Field(default=None, description="Exclusive start cursor")
    before: str | None = Field(default=None, description="Exclusive end cursor")
    order_bys: list[OrderBy] | None = Field(
        default=None,
        description="Ordering overriding the default",
    )


class PageInfo(BaseModel):
    """Pagination metadata following GraphQL Relay specification.

    Attributes:
        total_count: Total number of matching items (0 when no counter is available)
        has_previous_page: Whether there are items before the current page
        has_next_page: Whether there are items after the current page
        start_cursor: Cursor of the first item in this page
        end_cursor: Cursor of the last item in this page
    """

    total_count: int = Field(default=0, description="Total count")
    has_previous_page: bool = Field(description="Whether previous items exist")
    has_next_page: bool = Field(description="Whether more items exist")
    start_cursor: str | None = Field(
        default=None,
        description="Cursor of the first item",
    )
    end_cursor: str | None = Field(
        default=None,
        description="Cursor of the last item",
    )


class Edge(BaseModel, Generic[T]):
    """Edge wrapper for paginated items (Relay pattern).

    Attributes:
        node: The actual data item
        cursor: Cursor for this item (None when the paginator is nodes-only)
    """

    node: T = Field(description="The data item")
    cursor: str | None = Field(default=None, description="Cursor for this item")

    model_config = {"arbitrary_types_allowed": True}


class Connection(BaseModel, Generic[T]):
    """GraphQL Connection pattern for cursor pagination.

    Client navigation:
        # First page
        PaginateRequest(first=10)

        # Next page (using end_cursor from previous response)
        PaginateRequest(first=10, after=page_info.end_cursor)

        # Previous page (using start_cursor)
        PaginateRequest(last=10, before=page_info.start_cursor)

    Attributes:
        edges: List of Edge objects containing nodes and cursors
        page_info: Navigation metadata
    """

    edges: list[Edge[T]] = Field(
        default_factory=list,
        description="List of edges (items with cursors)",
    )
    page_info: PageInfo = Field(
        description="Pagination metadata",
    )

    model_config = {"arbitrary_types_allowed": True}

    @property
    def nodes(self) -> list[T]:
        """Get just the nodes without edge wrappers."""
        return [edge.node for edge in self.edges]

    def to_cursor_page(self) -> CursorPage[T]:
        """Convert to simple REST-style pagination.

        Returns:
            CursorPage with items and cursors
        """
        return CursorPage(
            items=self.nodes,
            next_cursor=self.page_info.end_cursor if self.page_info.has_next_page else None,
            prev_cursor=self.page_info.start_cursor if self.page_info.has_previous_page else None,
            has_more=self.page_info.has_next_page,
            total_count=self.page_info.total_count,
        )


class CursorPage(BaseModel, Generic[T]):
    """Simple REST-style cursor pagination response.

    Attributes:
        items: List of data items
        next_cursor: Cursor for the next page (None if no more)
        prev_cursor: Cursor for the previous page (None if at start)
        has_more: Whether more items exist after this page
        total_count: Total count
    """

    items: list[T] = Field(
        default_factory=list,
        description="List of items",
    )
    next_cursor: str | None = Field(
        default=None,
        description="Cursor to fetch next page",
    )
    prev_cursor: str | None = Field(
        default=None,
        description="Cursor to fetch previous page",
    )
    has_more: bool = Field(
        default=False,
        description="Whether more items exist",
    )
    total_count: int = Field(
        default=0,
        description="Total count",
    )

    model_config = {"arbitrary_types_allowed": True}


# ──────────────────────────────────────────────────────────────
# Paginator <-> adapter contract
# ──────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class ApplyCursorsRequest:
    """Resolved range handed to an apply-cursors callable.

    Attributes:
        after: Opaque exclusive start cursor
        before: Opaque exclusive end cursor
        order_bys: Effective ordering (never empty)
        limit: Maximum number of rows to fetch
        from_last: Fetch the tail end first ("last N before X")
    """

    order_bys: Sequence[OrderBy]
    limit: int
    after: str | None = None
    before: str | None = None
    from_last: bool = False


@dataclass(slots=True)
class LazyEdge(Generic[T]):
    """Fetched node with a deferred cursor.

    The cursor is a zero-argument callable so wrapping stages can replace
    it before it is evaluated.
    """

    node: T
    cursor: Callable[[], str]


@dataclass(slots=True)
class ApplyCursorsResponse(Generic[T]):
    """Result of an apply-cursors call.

    Attributes:
        edges: Fetched nodes in forward order, with lazy cursors
        total_count: Total matching rows (0 when no counter is available)
        has_after_or_previous: Whether items exist at or before the after boundary
        has_before_or_next: Whether items exist at or after the before boundary
    """

    edges: list[LazyEdge[T]] = field(default_factory=list)
    total_count: int = 0
    has_after_or_previous: bool = False
    has_before_or_next: bool = False


ApplyCursorsFunc = Callable[[ApplyCursorsRequest], Awaitable[ApplyCursorsResponse[T]]]
"""Async callable resolving an ApplyCursorsRequest against a store."""


__all__ = [
    "ApplyCursorsFunc",
    "ApplyCursorsRequest",
    "ApplyCursorsResponse",
    "Connection",
    "CursorPage",
    "Edge",
    "LazyEdge",
    "OrderBy",
    "PageInfo",
    "PaginateRequest",
]
