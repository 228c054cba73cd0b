"""Statement filters for keyset and offset pagination.

These filters work directly with SQLAlchemy statements without hiding the
query. They are utility helpers, not an abstraction layer.

The KeysetFilter implements the seek method:
    For ORDER BY age ASC, name DESC with a keyset (85, "name15"):
    WHERE (age > 85) OR (age = 85 AND name < 'name15')

The ``before`` boundary uses the same tree with every comparison flipped.
Ordering columns must be non-nullable: NULL never compares true.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import Date, DateTime, Float, Numeric, Select, Time, Uuid, and_, or_

from relay_pagination.core.exceptions import InvalidCursorError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.elements import ColumnElement


@dataclass(slots=True, frozen=True)
class OrderColumn:
    """Ordering term resolved to a mapped column.

    Attributes:
        field: Field name as it appears in keyset cursors
        column: Mapped attribute to compare and order by
        desc: Whether the field is ordered descending
    """

    field: str
    column: InstrumentedAttribute[Any]
    desc: bool = False


class StatementFilter(ABC):
    """Base class for statement filters.

    All filters implement `apply()` which modifies a SQLAlchemy statement.
    """

    @abstractmethod
    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply filter to statement.

        Args:
            statement: SQLAlchemy select statement

        Returns:
            Modified select statement
        """
        ...


def convert_keyset_value(column: InstrumentedAttribute[Any], value: Any) -> Any:
    """Convert a JSON-decoded keyset value back to the column's Python type.

    Keyset cursors carry datetimes, dates, times, UUIDs and decimals as
    strings; everything else round-trips through JSON unchanged.

    Raises:
        InvalidCursorError: If the string does not parse as the column type
    """
    if not isinstance(value, str):
        return value

    column_type = getattr(column.type, "impl", column.type)
    try:
        if isinstance(column_type, DateTime):
            return datetime.fromisoformat(value)
        if isinstance(column_type, Date):
            return date.fromisoformat(value)
        if isinstance(column_type, Time):
            return time.fromisoformat(value)
        if isinstance(column_type, Uuid):
            return UUID(value)
        if isinstance(column_type, Numeric) and not isinstance(column_type, Float):
            return Decimal(value)
    except (ValueError, InvalidOperation) as e:
        raise InvalidCursorError(
            "keyset value does not match column type",
            details={"field": column.key},
        ) from e
    return value


class KeysetFilter(StatementFilter):
    """Restrict a statement to rows strictly after (or before) a keyset.

    Example:
        columns = [OrderColumn("age", User.age), OrderColumn("name", User.name, desc=True)]
        stmt = KeysetFilter(columns, {"age": 85, "name": "name15"}).apply(select(User))
        # WHERE age > 85 OR (age = 85 AND name < 'name15')

    Attributes:
        columns: Ordering columns, most significant first
        keyset: Field name to boundary value
        reverse: Select rows before the keyset instead of after it
    """

    def __init__(
        self,
        columns: Sequence[OrderColumn],
        keyset: Mapping[str, Any],
        *,
        reverse: bool = False,
    ) -> None:
        self.columns = columns
        self.keyset = keyset
        self.reverse = reverse

    def expression(self) -> ColumnElement[bool]:
        """Build the OR-of-ANDs seek predicate."""
        ors: list[ColumnElement[bool]] = []
        eqs: list[ColumnElement[bool]] = []
        for order_column in self.columns:
            if order_column.field not in self.keyset:
                msg = f"missing field {order_column.field!r} in keyset"
                raise InvalidCursorError(msg)
            column = order_column.column
            value = convert_keyset_value(column, self.keyset[order_column.field])

            # desc XOR reverse: seek towards smaller values
            if order_column.desc != self.reverse:
                compare = column < value
            else:
                compare = column > value

            ors.append(and_(*eqs, compare) if eqs else compare)
            eqs.append(column == value)
        return or_(*ors)

    def apply(self, statement: Select[Any]) -> Select[Any]:
        return statement.where(self.expression())


class OrderByFilter(StatementFilter):
    """Replace the statement ordering with the pagination ordering.

    With ``reverse`` every direction is flipped, so the tail end of the
    order comes first.
    """

    def __init__(self, columns: Sequence[OrderColumn], *, reverse: bool = False) -> None:
        self.columns = columns
        self.reverse = reverse

    def apply(self, statement: Select[Any]) -> Select[Any]:
        statement = statement.order_by(None)
        for order_column in self.columns:
            if order_column.desc != self.reverse:
                statement = statement.order_by(order_column.column.desc())
            else:
                statement = statement.order_by(order_column.column.asc())
        return statement


class LimitOffset(StatementFilter):
    """Pagination using LIMIT and OFFSET.

    Example:
        # Rows 20..29
        stmt = LimitOffset(limit=10, offset=20).apply(stmt)
    """

    def __init__(self, limit: int, offset: int = 0):
        self.limit = limit
        self.offset = offset

    def apply(self, statement: Select[Any]) -> Select[Any]:
        statement = statement.limit(self.limit)
        if self.offset > 0:
            statement = statement.offset(self.offset)
        return statement


__all__ = [
    "KeysetFilter",
    "LimitOffset",
    "OrderByFilter",
    "OrderColumn",
    "StatementFilter",
    "convert_keyset_value",
]
