"""Relay pagination types for GraphQL.

Resolvers accept a PaginationInput (and optionally a list of OrderByInput),
convert it to a PaginateRequest, run the Paginator and map the resulting
PageInfo back with ``to_page_info_type``.

Example:
    @strawberry.type
    class UserEdge:
        node: UserType
        cursor: str | None

    @strawberry.type
    class UserConnection:
        edges: list[UserEdge]
        page_info: PageInfoType

    @strawberry.field
    async def users(
        self,
        info: Info,
        page: PaginationInput | None = None,
        order_by: list[OrderByInput] | None = None,
    ) -> UserConnection:
        request = (page or PaginationInput()).to_request(order_by)
        connection = await info.context.user_paginator.paginate(request)
        return UserConnection(
            edges=[UserEdge(node=UserType.from_model(e.node), cursor=e.cursor) for e in connection.edges],
            page_info=to_page_info_type(connection.page_info),
        )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from relay_pagination.core.pagination.schemas import OrderBy, PaginateRequest

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relay_pagination.core.pagination.schemas import PageInfo

__all__ = [
    "OrderByInput",
    "PageInfoType",
    "PaginationInput",
    "to_page_info_type",
]


# ============================================================================
# Output types
# ============================================================================


@strawberry.type(description="Relay page metadata")
class PageInfoType:
    """GraphQL Relay PageInfo for cursor-based pagination.

    Mirrors relay_pagination.core.pagination.schemas.PageInfo.
    """

    has_previous_page: bool = strawberry.field(description="Whether previous items exist")
    has_next_page: bool = strawberry.field(description="Whether more items exist")
    start_cursor: str | None = strawberry.field(
        default=None,
        description="Cursor of the first item",
    )
    end_cursor: str | None = strawberry.field(
        default=None,
        description="Cursor of the last item",
    )
    total_count: int = strawberry.field(
        default=0,
        description="Total count (0 when counting is disabled)",
    )


def to_page_info_type(page_info: PageInfo) -> PageInfoType:
    """Convert engine PageInfo to its GraphQL type."""
    return PageInfoType(
        has_previous_page=page_info.has_previous_page,
        has_next_page=page_info.has_next_page,
        start_cursor=page_info.start_cursor,
        end_cursor=page_info.end_cursor,
        total_count=page_info.total_count,
    )


# ============================================================================
# Inputs
# ============================================================================


@strawberry.input(description="One ordering term")
class OrderByInput:
    """Ordering term for a paginated query."""

    field: str = strawberry.field(description="Field name to order by")
    desc: bool = strawberry.field(default=False, description="Descending order")

    def to_order_by(self) -> OrderBy:
        return OrderBy(field=self.field, desc=self.desc)


@strawberry.input(description="Input for cursor-based pagination")
class PaginationInput:
    """Input parameters for cursor-based pagination.

    This input type is used in queries to specify pagination parameters
    following the Relay cursor connection specification. Validation
    (first with last, limits, cursors) happens in the Paginator.
    """

    first: int | None = strawberry.field(
        default=None,
        description="Number of items to return from the start",
    )

    after: str | None = strawberry.field(
        default=None,
        description="Cursor to start pagination from (exclusive)",
    )

    last: int | None = strawberry.field(
        default=None,
        description="Number of items to return from the end",
    )

    before: str | None = strawberry.field(
        default=None,
        description="Cursor to end pagination at (exclusive)",
    )

    def to_request(self, order_bys: Sequence[OrderByInput] | None = None) -> PaginateRequest:
        """Build the engine request, keeping the paginator default order when none is given."""
        return PaginateRequest(
            first=self.first,
            last=self.last,
            after=self.after,
            before=self.before,
            order_bys=[o.to_order_by() for o in order_bys] if order_bys else None,
        )
