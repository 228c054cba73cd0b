"""SQLAlchemy finders for keyset and offset pagination.

Each finder wraps an async session and a base select statement (filters,
joins and options already applied) and implements the finder protocol of
its pagination mode plus the optional count capability.

Example:
    from sqlalchemy import select

    stmt = select(User).where(User.is_active.is_(True))
    paginator = Paginator(
        keyset_adapter(session, stmt),
        max_limit=100,
        limit_if_not_set=20,
        order_bys_if_not_set=[OrderBy(field="created_at", desc=True), OrderBy(field="id")],
    )
    connection = await paginator.paginate(PaginateRequest(first=20, after=cursor))

Field names in OrderBy must match mapped attribute names of the model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy import inspect as sa_inspect

from relay_pagination.core.database.filters import (
    KeysetFilter,
    LimitOffset,
    OrderByFilter,
    OrderColumn,
)
from relay_pagination.core.exceptions import (
    InvalidCursorError,
    InvalidPaginationRequestError,
)
from relay_pagination.core.pagination.keyset import KeysetAdapter
from relay_pagination.core.pagination.offset import OffsetAdapter
from relay_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from relay_pagination.core.pagination.finders import OffsetCursorParser
    from relay_pagination.core.pagination.schemas import OrderBy


def statement_entity(statement: Select[Any]) -> type[Any]:
    """Return the mapped class a select statement is rooted at."""
    descriptions = statement.column_descriptions
    entity = descriptions[0].get("entity") if descriptions else None
    if entity is None:
        msg = "cannot determine mapped entity of statement; pass model explicitly"
        raise ValueError(msg)
    return entity


class SQLAlchemyFinder[T]:
    """Shared session/statement handling for the SQL finders.

    Attributes:
        session: Async session executing the queries
        statement: Base select statement without pagination
        model: Mapped class used to resolve order fields to columns
    """

    __slots__ = ("_lazy", "model", "session", "statement")

    def __init__(
        self,
        session: AsyncSession,
        statement: Select[tuple[T]],
        model: type[T] | None = None,
    ) -> None:
        self.session = session
        self.statement = statement
        self.model = model or statement_entity(statement)
        self._lazy = get_lazy_logger(f"relay_pagination.core.database.{self.model.__name__}")

    def order_columns(self, order_bys: Sequence[OrderBy]) -> list[OrderColumn]:
        """Resolve OrderBy field names to mapped columns.

        Raises:
            InvalidPaginationRequestError: If a field is not a mapped column
        """
        column_attrs = sa_inspect(self.model).column_attrs
        columns = []
        for order_by in order_bys:
            if order_by.field not in column_attrs:
                msg = f"unknown order by field {order_by.field!r}"
                raise InvalidPaginationRequestError(
                    msg,
                    field="order_bys",
                    details={"model": self.model.__name__},
                )
            columns.append(
                OrderColumn(
                    field=order_by.field,
                    column=getattr(self.model, order_by.field),
                    desc=order_by.desc,
                )
            )
        return columns

    async def count(self) -> int:
        """Count rows matched by the base statement."""
        count_stmt = select(func.count()).select_from(self.statement.order_by(None).subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()
        self._lazy.debug(lambda: f"db.count: {self.model.__name__} -> {total}")
        return int(total)

    async def _fetch(self, statement: Select[tuple[T]]) -> list[T]:
        result = await self.session.execute(statement)
        return list(result.scalars().all())


class SQLAlchemyKeysetFinder[T](SQLAlchemyFinder[T]):
    """Keyset finder over a select statement.

    Rows for ``from_last`` requests come back in reversed order; the
    KeysetAdapter restores forward order.
    """

    __slots__ = ()

    async def find(
        self,
        after: Mapping[str, Any] | None,
        before: Mapping[str, Any] | None,
        order_bys: Sequence[OrderBy],
        limit: int,
        from_last: bool,
    ) -> list[T]:
        if limit <= 0:
            return []

        columns = self.order_columns(order_bys)
        statement = self.statement
        if after is not None:
            try:
                statement = KeysetFilter(columns, after).apply(statement)
            except InvalidCursorError as e:
                raise e.with_boundary("after") from e
        if before is not None:
            try:
                statement = KeysetFilter(columns, before, reverse=True).apply(statement)
            except InvalidCursorError as e:
                raise e.with_boundary("before") from e
        statement = OrderByFilter(columns, reverse=from_last).apply(statement)
        statement = LimitOffset(limit).apply(statement)

        rows = await self._fetch(statement)
        self._lazy.debug(
            lambda: f"db.keyset_find: {self.model.__name__}(limit={limit}, from_last={from_last}) -> {len(rows)} rows"
        )
        return rows


class SQLAlchemyOffsetFinder[T](SQLAlchemyFinder[T]):
    """Offset finder over a select statement."""

    __slots__ = ()

    async def find(
        self,
        order_bys: Sequence[OrderBy],
        skip: int,
        limit: int,
    ) -> list[T]:
        if limit <= 0:
            return []

        statement = self.statement
        if order_bys:
            statement = OrderByFilter(self.order_columns(order_bys)).apply(statement)
        statement = LimitOffset(limit, skip).apply(statement)

        rows = await self._fetch(statement)
        self._lazy.debug(
            lambda: f"db.offset_find: {self.model.__name__}(skip={skip}, limit={limit}) -> {len(rows)} rows"
        )
        return rows


def keyset_adapter[T](
    session: AsyncSession,
    statement: Select[tuple[T]],
    *,
    model: type[T] | None = None,
    with_count: bool = True,
) -> KeysetAdapter[T]:
    """Build a keyset apply-cursors callable over a select statement.

    Args:
        session: Async session executing the queries
        statement: Base select statement without pagination
        model: Mapped class (derived from the statement when omitted)
        with_count: Run a count query to fill PageInfo.total_count
    """
    finder = SQLAlchemyKeysetFinder(session, statement, model)
    return KeysetAdapter(finder, counter=finder if with_count else None)


def offset_adapter[T](
    session: AsyncSession,
    statement: Select[tuple[T]],
    *,
    model: type[T] | None = None,
    with_count: bool = True,
    parser: OffsetCursorParser | None = None,
) -> OffsetAdapter[T]:
    """Build an offset apply-cursors callable over a select statement.

    Args:
        session: Async session executing the queries
        statement: Base select statement without pagination
        model: Mapped class (derived from the statement when omitted)
        with_count: Run a count query (exact page boundary flags)
        parser: Offset cursor format override
    """
    finder = SQLAlchemyOffsetFinder(session, statement, model)
    return OffsetAdapter(finder, counter=finder if with_count else None, parser=parser)


__all__ = [
    "SQLAlchemyFinder",
    "SQLAlchemyKeysetFinder",
    "SQLAlchemyOffsetFinder",
    "keyset_adapter",
    "offset_adapter",
    "statement_entity",
]
