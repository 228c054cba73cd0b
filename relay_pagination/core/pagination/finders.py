"""Store-facing capabilities used by the pagination adapters.

A backing store implements one of the finder protocols. Optional
capabilities (total count, custom offset cursor format) are separate
protocols that are handed to the adapters explicitly:

    finder = SQLAlchemyKeysetFinder(session, select(User))
    apply_cursors = KeysetAdapter(finder, counter=finder)

Nothing is detected at run time; an adapter built without a counter
never counts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from relay_pagination.core.pagination.schemas import OrderBy

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class KeysetFinder(Protocol[T_co]):
    """Fetch rows bounded by keysets.

    Example:
        >>> class ListFinder:
        ...     async def find(self, after, before, order_bys, limit, from_last):
        ...         rows = sort_rows(self.rows, order_bys, reverse=from_last)
        ...         return [r for r in rows if in_range(r, after, before)][:limit]
    """

    async def find(
        self,
        after: Mapping[str, Any] | None,
        before: Mapping[str, Any] | None,
        order_bys: Sequence[OrderBy],
        limit: int,
        from_last: bool,
    ) -> Sequence[T_co]:
        """Return up to ``limit`` rows strictly between the keysets.

        Rows are sorted by ``order_bys``, or by ``order_bys`` with every
        direction flipped when ``from_last`` is true (tail end first).
        The adapter restores forward order.
        """
        ...


@runtime_checkable
class OffsetFinder(Protocol[T_co]):
    """Fetch a plain range of rows."""

    async def find(
        self,
        order_bys: Sequence[OrderBy],
        skip: int,
        limit: int,
    ) -> Sequence[T_co]:
        """Return up to ``limit`` rows starting at zero-based position ``skip``."""
        ...


@runtime_checkable
class Counter(Protocol):
    """Optional total-count capability."""

    async def count(self) -> int:
        """Return the number of matching rows, ignoring pagination bounds."""
        ...


@runtime_checkable
class OffsetCursorParser(Protocol):
    """Optional override of the offset cursor format."""

    def encode(self, offset: int) -> str:
        """Encode a zero-based position as an opaque cursor."""
        ...

    def decode(self, cursor: str) -> int:
        """Decode an opaque cursor back to a zero-based position.

        Raises:
            InvalidCursorError: If the cursor is malformed
        """
        ...


__all__ = [
    "Counter",
    "KeysetFinder",
    "OffsetCursorParser",
    "OffsetFinder",
]
