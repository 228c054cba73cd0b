"""Relay-style pagination engine.

The Paginator validates a ``first``/``last``/``after``/``before`` request,
resolves the effective limit and ordering, asks its apply-cursors callable
for one row more than the page size, and rebuilds PageInfo from what came
back:

    forward (first / default):
        has_next_page     = surplus row fetched or a before boundary exists
        has_previous_page = an after boundary exists

    backward (last):
        has_previous_page = surplus row fetched or an after boundary exists
        has_next_page     = a before boundary exists

The surplus row is dropped from the end of the page for forward requests
and from the start for backward ones, so "last N before X" returns the N
rows immediately preceding X in forward order.

A Paginator holds only immutable configuration and may be shared between
concurrent requests. Cancellation of the awaiting task propagates into the
store fetch and is never wrapped.
"""

from __future__ import annotations

from collections import Counter as _Counter
from typing import TYPE_CHECKING, Any

from relay_pagination.core.exceptions import (
    InvalidPaginationRequestError,
    PaginationConfigError,
)
from relay_pagination.core.pagination.schemas import (
    ApplyCursorsRequest,
    Connection,
    Edge,
    OrderBy,
    PageInfo,
    PaginateRequest,
)
from relay_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relay_pagination.core.pagination.schemas import ApplyCursorsFunc
    from relay_pagination.core.settings.pagination import PaginationSettings


class Paginator[T]:
    """Cursor pagination orchestrator.

    Example:
        paginator = Paginator(
            KeysetAdapter(finder, counter=finder),
            max_limit=100,
            limit_if_not_set=20,
            order_bys_if_not_set=[OrderBy(field="created_at", desc=True), OrderBy(field="id")],
        )
        connection = await paginator.paginate(PaginateRequest(first=10, after=cursor))

        for edge in connection.edges:
            print(edge.node, edge.cursor)
        if connection.page_info.has_next_page:
            next_cursor = connection.page_info.end_cursor
    """

    __slots__ = (
        "_lazy",
        "apply_cursors",
        "limit_if_not_set",
        "max_limit",
        "nodes_only",
        "order_bys_if_not_set",
    )

    def __init__(
        self,
        apply_cursors: ApplyCursorsFunc[T],
        *,
        max_limit: int,
        limit_if_not_set: int,
        order_bys_if_not_set: Sequence[OrderBy],
        nodes_only: bool = False,
    ) -> None:
        """Initialize paginator.

        Args:
            apply_cursors: Finder-backed callable resolving the fetch range
            max_limit: Largest accepted first/last
            limit_if_not_set: Page size when neither first nor last is given
            order_bys_if_not_set: Ordering when the request gives none
            nodes_only: Skip cursor materialization entirely

        Raises:
            PaginationConfigError: If the configuration is invalid
        """
        if limit_if_not_set <= 0:
            msg = "limit_if_not_set must be greater than 0"
            raise PaginationConfigError(msg, details={"limit_if_not_set": limit_if_not_set})
        if max_limit < limit_if_not_set:
            msg = "max_limit must be greater than or equal to limit_if_not_set"
            raise PaginationConfigError(
                msg,
                details={"max_limit": max_limit, "limit_if_not_set": limit_if_not_set},
            )
        if apply_cursors is None:
            msg = "apply_cursors must be set"
            raise PaginationConfigError(msg)
        if not order_bys_if_not_set:
            msg = "order_bys_if_not_set must not be empty"
            raise PaginationConfigError(msg)

        self.apply_cursors = apply_cursors
        self.max_limit = max_limit
        self.limit_if_not_set = limit_if_not_set
        self.order_bys_if_not_set = tuple(order_bys_if_not_set)
        self.nodes_only = nodes_only
        self._lazy = get_lazy_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        apply_cursors: ApplyCursorsFunc[T],
        order_bys_if_not_set: Sequence[OrderBy],
        settings: PaginationSettings | None = None,
    ) -> Paginator[T]:
        """Build a paginator from PaginationSettings.

        Cursor transforms configured in the settings are chained around
        ``apply_cursors``.

        Args:
            apply_cursors: Finder-backed callable (plain cursors)
            order_bys_if_not_set: Default ordering
            settings: Settings to use (defaults to the cached loader)
        """
        from relay_pagination.core.pagination.transforms import chain_cursor_transforms
        from relay_pagination.core.settings import get_pagination_settings

        settings = settings or get_pagination_settings()
        return cls(
            chain_cursor_transforms(apply_cursors, *settings.build_cursor_transforms()),
            max_limit=settings.max_limit,
            limit_if_not_set=settings.default_limit,
            order_bys_if_not_set=order_bys_if_not_set,
            nodes_only=settings.nodes_only,
        )

    def _resolve_limit(self, request: PaginateRequest) -> int:
        if request.first is not None and request.last is not None:
            msg = "first and last cannot be used together"
            raise InvalidPaginationRequestError(msg, field="first")
        if request.first is not None and request.first < 0:
            msg = "first must be a non-negative integer"
            raise InvalidPaginationRequestError(msg, field="first")
        if request.last is not None and request.last < 0:
            msg = "last must be a non-negative integer"
            raise InvalidPaginationRequestError(msg, field="last")

        if request.first is not None:
            field, limit = "first", request.first
        elif request.last is not None:
            field, limit = "last", request.last
        else:
            return self.limit_if_not_set

        if limit > self.max_limit:
            msg = f"{field} must be less than or equal to max limit"
            raise InvalidPaginationRequestError(
                msg,
                field=field,
                details={"max_limit": self.max_limit},
            )
        return limit

    def _resolve_order_bys(self, request: PaginateRequest) -> tuple[OrderBy, ...]:
        order_bys = tuple(request.order_bys) if request.order_bys else self.order_bys_if_not_set
        counts = _Counter(order_by.field for order_by in order_bys)
        duplicated = [field for field, count in counts.items() if count > 1]
        if duplicated:
            msg = f"duplicated order by fields: {', '.join(duplicated)}"
            raise InvalidPaginationRequestError(
                msg,
                field="order_bys",
                details={"fields": duplicated},
            )
        return order_bys

    async def paginate(self, request: PaginateRequest) -> Connection[T]:
        """Fetch one page.

        Args:
            request: Relay pagination request

        Returns:
            Connection with edges in forward order and PageInfo

        Raises:
            InvalidPaginationRequestError: If the request is rejected
            InvalidCursorError: If after/before fails to decode
        """
        try:
            limit = self._resolve_limit(request)
            order_bys = self._resolve_order_bys(request)
            if (
                request.after is not None
                and request.before is not None
                and request.after == request.before
            ):
                msg = "after == before"
                raise InvalidPaginationRequestError(msg, field="after")
        except InvalidPaginationRequestError as e:
            self._lazy.debug(lambda: f"paginate: rejected request: {e}")
            raise

        from_last = request.last is not None

        response = await self.apply_cursors(
            ApplyCursorsRequest(
                order_bys=order_bys,
                limit=limit + 1,
                after=request.after,
                before=request.before,
                from_last=from_last,
            )
        )

        lazy_edges = response.edges
        has_more = len(lazy_edges) > limit
        if has_more:
            lazy_edges = lazy_edges[len(lazy_edges) - limit :] if from_last else lazy_edges[:limit]

        if from_last:
            has_previous_page = has_more or response.has_after_or_previous
            has_next_page = response.has_before_or_next
        else:
            has_next_page = has_more or response.has_before_or_next
            has_previous_page = response.has_after_or_previous

        edges: list[Edge[Any]] = [
            Edge(node=edge.node, cursor=None if self.nodes_only else edge.cursor())
            for edge in lazy_edges
        ]

        page_info = PageInfo(
            total_count=response.total_count,
            has_previous_page=has_previous_page,
            has_next_page=has_next_page,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )

        self._lazy.debug(
            lambda: (
                f"paginate: limit={limit} from_last={from_last} -> {len(edges)} edges, "
                f"has_next={has_next_page}, has_previous={has_previous_page}"
            )
        )

        return Connection(edges=edges, page_info=page_info)


__all__ = ["Paginator"]
