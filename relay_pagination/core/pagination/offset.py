"""Offset cursors and the offset apply-cursors adapter.

An offset cursor is the zero-based position of a row in the ordered result.
The default format is base64 of the decimal position; it is not meant to be
secret, encryption is layered on separately by cursor transforms.
"""

from __future__ import annotations

import base64
import binascii
from functools import partial
from typing import TYPE_CHECKING

from relay_pagination.core.exceptions import (
    InvalidCursorError,
    InvalidPaginationRequestError,
)
from relay_pagination.core.pagination.schemas import (
    ApplyCursorsRequest,
    ApplyCursorsResponse,
    LazyEdge,
)
from relay_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from relay_pagination.core.pagination.finders import (
        Counter,
        OffsetCursorParser,
        OffsetFinder,
    )

logger = get_lazy_logger(__name__)


class Base64OffsetParser:
    """Default offset cursor format: base64 of the decimal position.

    Example:
        >>> parser = Base64OffsetParser()
        >>> parser.encode(42)
        'NDI='
        >>> parser.decode("NDI=")
        42
    """

    __slots__ = ()

    def encode(self, offset: int) -> str:
        return base64.b64encode(str(offset).encode()).decode()

    def decode(self, cursor: str) -> int:
        try:
            text = base64.b64decode(cursor.encode(), validate=True).decode()
        except (binascii.Error, UnicodeError) as e:
            raise InvalidCursorError("malformed offset cursor") from e
        if not text.isascii() or not text.isdigit():
            # Rejects signs as well, so negative offsets never decode
            raise InvalidCursorError("offset cursor is not a non-negative integer")
        return int(text)


default_offset_parser = Base64OffsetParser()


def parse_offset_cursors(
    request: ApplyCursorsRequest,
    parser: OffsetCursorParser,
) -> tuple[int | None, int | None]:
    """Decode and check both request boundaries.

    Raises:
        InvalidCursorError: If a cursor fails to decode or is negative
        InvalidPaginationRequestError: If after is not strictly before before
    """
    after = before = None
    if request.after is not None:
        try:
            after = parser.decode(request.after)
        except InvalidCursorError as e:
            raise e.with_boundary("after") from e
    if request.before is not None:
        try:
            before = parser.decode(request.before)
        except InvalidCursorError as e:
            raise e.with_boundary("before") from e

    if after is not None and after < 0:
        raise InvalidCursorError("offset < 0").with_boundary("after")
    if before is not None and before < 0:
        raise InvalidCursorError("offset < 0").with_boundary("before")
    if after is not None and before is not None:
        if after == before:
            raise InvalidPaginationRequestError("after == before", field="after")
        if after > before:
            raise InvalidPaginationRequestError(
                "after must be less than before",
                field="after",
                details={"after": after, "before": before},
            )
    return after, before


def resolve_offset_range(
    after: int | None,
    before: int | None,
    limit: int,
    from_last: bool = False,
) -> tuple[int, int]:
    """Compute the (skip, limit) window for an offset fetch.

    The window starts right after ``after``, or ends right before ``before``,
    and never crosses either. With ``from_last`` the window is anchored at
    ``before`` even when ``after`` is also set.

    Example:
        >>> resolve_offset_range(None, 9, 3)
        (6, 3)
        >>> resolve_offset_range(None, 2, 5)
        (0, 2)
        >>> resolve_offset_range(4, 100, 3, from_last=True)
        (97, 3)
    """
    start = 0 if after is None else after + 1
    skip = start
    if before is not None and (from_last or after is None):
        skip = max(before - limit, start)
    skip = max(skip, 0)

    if before is not None:
        limit = min(limit, max(before - skip, 0))
    return skip, limit


class OffsetAdapter[T]:
    """Apply-cursors callable backed by an OffsetFinder.

    With a counter, boundary flags are exact (a boundary exists when its
    position is inside the result). Without one they only report that a
    cursor was supplied, and ``last`` without ``before`` pages forward from
    ``after`` (or the first row) since the tail is unknown.
    """

    __slots__ = ("counter", "finder", "parser")

    def __init__(
        self,
        finder: OffsetFinder[T],
        counter: Counter | None = None,
        parser: OffsetCursorParser | None = None,
    ) -> None:
        """Initialize adapter.

        Args:
            finder: Store capability performing the ranged fetch
            counter: Optional total-count capability
            parser: Optional cursor format override (defaults to base64)
        """
        self.finder = finder
        self.counter = counter
        self.parser = parser or default_offset_parser

    async def __call__(self, request: ApplyCursorsRequest) -> ApplyCursorsResponse[T]:
        after, before = parse_offset_cursors(request, self.parser)

        total_count = 0
        if self.counter is not None:
            total_count = await self.counter.count()

        end = before
        fetch_limit = request.limit
        if end is None and request.from_last:
            if self.counter is not None:
                # "last N" without a before cursor ends at the last row
                end = total_count
            else:
                # The tail is unknown, so the window starts at `after`. A
                # surplus row would be trimmed off its front.
                fetch_limit -= 1
        skip, limit = resolve_offset_range(after, end, fetch_limit, request.from_last)

        nodes: list[T] = []
        if limit > 0 and (self.counter is None or skip < total_count):
            nodes = list(await self.finder.find(request.order_bys, skip, limit))

        logger.debug(
            lambda: (
                f"offset.apply_cursors: skip={skip} limit={limit} "
                f"-> {len(nodes)} nodes, total={total_count}"
            )
        )

        response = ApplyCursorsResponse(
            edges=[
                LazyEdge(node=node, cursor=partial(self.parser.encode, skip + i))
                for i, node in enumerate(nodes)
            ],
            total_count=total_count,
        )
        if self.counter is not None:
            response.has_after_or_previous = after is not None and after < total_count
            response.has_before_or_next = before is not None and before < total_count
        else:
            response.has_after_or_previous = after is not None
            response.has_before_or_next = before is not None
        return response


__all__ = [
    "Base64OffsetParser",
    "OffsetAdapter",
    "default_offset_parser",
    "parse_offset_cursors",
    "resolve_offset_range",
]
