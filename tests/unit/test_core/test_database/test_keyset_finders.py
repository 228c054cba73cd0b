"""Tests for the SQLAlchemy finders and statement filters.

This module tests:
- KeysetFilter predicate shape for ascending, descending and reversed seeks
- OrderByFilter and LimitOffset
- SQLAlchemyKeysetFinder and SQLAlchemyOffsetFinder against SQLite
- keyset_adapter / offset_adapter end to end through the Paginator
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import DateTime, Integer, String, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from relay_pagination.core.database import (
    KeysetFilter,
    LimitOffset,
    OrderByFilter,
    OrderColumn,
    SQLAlchemyKeysetFinder,
    convert_keyset_value,
    keyset_adapter,
    offset_adapter,
)
from relay_pagination.core.exceptions import (
    InvalidCursorError,
    InvalidPaginationRequestError,
)
from relay_pagination.core.pagination import (
    EncryptedCursorTransform,
    OrderBy,
    PaginateRequest,
    Paginator,
    chain_cursor_transforms,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


# ============================================================================
# Test Models
# ============================================================================


class Base(DeclarativeBase):
    pass


class Member(Base):
    """Test model: id i+1, name "name{i}", age 100-i."""

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64))
    age: Mapped[int] = mapped_column(Integer)
    joined_at: Mapped[datetime] = mapped_column(DateTime)


def render(statement) -> str:
    return str(statement.compile(compile_kwargs={"literal_binds": True}))


def ids(connection) -> list[int]:
    return [edge.node.id for edge in connection.edges]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
async def async_engine():
    """Create async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncGenerator[AsyncSession]:
    """Session seeded with 100 members."""
    async with AsyncSession(async_engine, expire_on_commit=False) as session:
        session.add_all(
            Member(
                id=i + 1,
                name=f"name{i}",
                age=100 - i,
                joined_at=BASE_TIME + timedelta(minutes=i % 10),
            )
            for i in range(100)
        )
        await session.commit()
        yield session


@pytest.fixture
def default_member_order() -> list[OrderBy]:
    return [OrderBy(field="id"), OrderBy(field="age", desc=True)]


def make_paginator(apply_cursors, order, *, max_limit: int = 20) -> Paginator:
    return Paginator(
        apply_cursors,
        max_limit=max_limit,
        limit_if_not_set=10,
        order_bys_if_not_set=order,
    )


# ============================================================================
# Statement filters
# ============================================================================


class TestKeysetFilter:
    """Tests for the seek predicate."""

    @pytest.fixture
    def columns(self) -> list[OrderColumn]:
        return [
            OrderColumn("age", Member.age),
            OrderColumn("name", Member.name, desc=True),
        ]

    def test_after_predicate(self, columns):
        """Ascending compares with >, descending with <."""
        sql = render(KeysetFilter(columns, {"age": 85, "name": "name15"}).apply(select(Member)))

        assert "members.age > 85 OR members.age = 85 AND members.name < 'name15'" in sql

    def test_before_predicate(self, columns):
        """The before boundary flips every comparison."""
        sql = render(
            KeysetFilter(columns, {"age": 88, "name": "name12"}, reverse=True).apply(select(Member))
        )

        assert "members.age < 88 OR members.age = 88 AND members.name > 'name12'" in sql

    def test_range_with_order(self, columns):
        """after, before and ordering combine into one statement."""
        stmt = select(Member)
        stmt = KeysetFilter(columns, {"age": 85, "name": "name15"}).apply(stmt)
        stmt = KeysetFilter(columns, {"age": 88, "name": "name12"}, reverse=True).apply(stmt)
        stmt = OrderByFilter(columns).apply(stmt)

        sql = render(stmt)

        assert "(members.age > 85 OR members.age = 85 AND members.name < 'name15')" in sql
        assert "(members.age < 88 OR members.age = 88 AND members.name > 'name12')" in sql
        assert sql.rstrip().endswith("ORDER BY members.age ASC, members.name DESC")

    def test_single_column(self):
        """One column gives a single comparison."""
        sql = render(KeysetFilter([OrderColumn("id", Member.id)], {"id": 5}).apply(select(Member)))

        assert "WHERE members.id > 5" in sql

    def test_missing_field(self, columns):
        """A keyset without an ordering field is an invalid cursor."""
        with pytest.raises(InvalidCursorError, match="missing field 'name'"):
            KeysetFilter(columns, {"age": 85}).expression()


class TestOrderByFilter:
    """Tests for pagination ordering."""

    def test_reverse_flips_directions(self):
        """reverse flips ASC and DESC."""
        columns = [OrderColumn("age", Member.age), OrderColumn("name", Member.name, desc=True)]

        sql = render(OrderByFilter(columns, reverse=True).apply(select(Member)))

        assert sql.rstrip().endswith("ORDER BY members.age DESC, members.name ASC")

    def test_replaces_existing_order(self):
        """Existing ordering is dropped."""
        stmt = select(Member).order_by(Member.joined_at)

        sql = render(OrderByFilter([OrderColumn("id", Member.id)]).apply(stmt))

        assert sql.rstrip().endswith("ORDER BY members.id ASC")


class TestLimitOffset:
    """Tests for LIMIT/OFFSET."""

    def test_limit_only(self):
        sql = render(LimitOffset(10).apply(select(Member)))

        assert "LIMIT 10" in sql
        assert "OFFSET" not in sql

    def test_limit_and_offset(self):
        sql = render(LimitOffset(10, 20).apply(select(Member)))

        assert "LIMIT 10 OFFSET 20" in sql


class TestConvertKeysetValue:
    """Tests for restoring JSON values to column types."""

    def test_datetime(self):
        """ISO strings become datetimes for DateTime columns."""
        value = convert_keyset_value(Member.joined_at, "2025-01-01T12:00:00")

        assert value == BASE_TIME

    def test_passthrough(self):
        """Non-string values and string columns are untouched."""
        assert convert_keyset_value(Member.age, 5) == 5
        assert convert_keyset_value(Member.name, "name5") == "name5"

    def test_invalid_datetime(self):
        """Unparseable values are invalid cursors."""
        with pytest.raises(InvalidCursorError, match="does not match column type"):
            convert_keyset_value(Member.joined_at, "yesterday")


# ============================================================================
# Finders against SQLite
# ============================================================================


class TestSQLAlchemyKeysetFinder:
    """Tests for the keyset finder."""

    async def test_count_respects_filters(self, session):
        """count uses the base statement's filters."""
        finder = SQLAlchemyKeysetFinder(session, select(Member).where(Member.age > 50))

        assert await finder.count() == 50

    async def test_from_last_returns_reversed(self, session):
        """from_last rows come back tail first."""
        finder = SQLAlchemyKeysetFinder(session, select(Member))

        rows = await finder.find(None, {"id": 9}, [OrderBy(field="id")], 3, True)

        assert [row.id for row in rows] == [8, 7, 6]

    async def test_zero_limit_skips_query(self, session):
        """limit 0 returns no rows."""
        finder = SQLAlchemyKeysetFinder(session, select(Member))

        assert await finder.find(None, None, [OrderBy(field="id")], 0, False) == []

    async def test_unknown_field(self, session):
        """Ordering by an unmapped field is a request error."""
        finder = SQLAlchemyKeysetFinder(session, select(Member))

        with pytest.raises(InvalidPaginationRequestError, match="unknown order by field 'email'"):
            await finder.find(None, None, [OrderBy(field="email")], 5, False)

    async def test_bad_value_names_boundary(self, session):
        """Conversion errors carry the failing boundary."""
        finder = SQLAlchemyKeysetFinder(session, select(Member))

        with pytest.raises(InvalidCursorError) as exc:
            await finder.find({"joined_at": "soon"}, None, [OrderBy(field="joined_at")], 5, False)

        assert exc.value.boundary == "after"

    def test_model_from_statement(self, session):
        """The mapped class is taken from the statement."""
        assert SQLAlchemyKeysetFinder(session, select(Member)).model is Member


class TestKeysetAdapterEndToEnd:
    """Tests for keyset pagination through the Paginator."""

    async def test_default_page(self, session, default_member_order):
        """The first page holds the first ten members."""
        paginator = make_paginator(keyset_adapter(session, select(Member)), default_member_order)

        connection = await paginator.paginate(PaginateRequest())

        assert ids(connection) == list(range(1, 11))
        assert connection.page_info.total_count == 100
        assert connection.page_info.has_next_page is True
        assert connection.page_info.has_previous_page is False
        assert connection.page_info.end_cursor == '{"age":91,"id":10}'

    async def test_next_and_previous(self, session, default_member_order):
        """end_cursor and start_cursor navigate both ways."""
        paginator = make_paginator(keyset_adapter(session, select(Member)), default_member_order)

        page1 = await paginator.paginate(PaginateRequest(first=5))
        page2 = await paginator.paginate(PaginateRequest(first=5, after=page1.page_info.end_cursor))
        back = await paginator.paginate(PaginateRequest(last=5, before=page2.page_info.start_cursor))

        assert ids(page2) == [6, 7, 8, 9, 10]
        assert page2.page_info.has_previous_page is True
        assert ids(back) == [1, 2, 3, 4, 5]
        assert back.page_info.has_previous_page is False
        assert back.page_info.has_next_page is True

    async def test_after_last_member(self, session, default_member_order):
        """Paging past the end is empty."""
        paginator = make_paginator(keyset_adapter(session, select(Member)), default_member_order)

        connection = await paginator.paginate(PaginateRequest(after='{"age":1,"id":100}'))

        assert connection.edges == []
        assert connection.page_info.has_next_page is False
        assert connection.page_info.has_previous_page is True

    async def test_mixed_directions(self, session):
        """Descending datetime with an ascending tie-breaker walks every row."""
        order = [OrderBy(field="joined_at", desc=True), OrderBy(field="id")]
        paginator = make_paginator(keyset_adapter(session, select(Member)), order)

        seen: list[int] = []
        after = None
        while True:
            connection = await paginator.paginate(PaginateRequest(first=7, after=after))
            seen.extend(ids(connection))
            if not connection.page_info.has_next_page:
                break
            after = connection.page_info.end_cursor

        expected = [i + 1 for i in sorted(range(100), key=lambda i: (-(i % 10), i))]
        assert seen == expected

    async def test_filtered_statement_without_count(self, session, default_member_order):
        """with_count=False leaves total_count at 0."""
        statement = select(Member).where(Member.age <= 20)
        paginator = make_paginator(
            keyset_adapter(session, statement, with_count=False),
            default_member_order,
        )

        connection = await paginator.paginate(PaginateRequest(first=3))

        assert ids(connection) == [81, 82, 83]
        assert connection.page_info.total_count == 0

    async def test_encrypted_cursors(self, session, default_member_order):
        """SQL pagination works through encrypted cursors."""
        from cryptography.fernet import Fernet

        apply_cursors = chain_cursor_transforms(
            keyset_adapter(session, select(Member)),
            EncryptedCursorTransform(Fernet.generate_key()),
        )
        paginator = make_paginator(apply_cursors, default_member_order)

        page1 = await paginator.paginate(PaginateRequest(first=4))
        page2 = await paginator.paginate(PaginateRequest(first=4, after=page1.page_info.end_cursor))

        assert ids(page2) == [5, 6, 7, 8]


class TestOffsetAdapterEndToEnd:
    """Tests for offset pagination through the Paginator."""

    async def test_pages(self, session, default_member_order):
        """Offset cursors navigate forward and back."""
        paginator = make_paginator(offset_adapter(session, select(Member)), default_member_order)

        page1 = await paginator.paginate(PaginateRequest(first=10))
        page2 = await paginator.paginate(PaginateRequest(first=10, after=page1.page_info.end_cursor))
        back = await paginator.paginate(PaginateRequest(last=10, before=page2.page_info.start_cursor))

        assert ids(page2) == list(range(11, 21))
        assert page2.page_info.has_previous_page is True
        assert page2.page_info.has_next_page is True
        assert ids(back) == list(range(1, 11))

    async def test_last_page(self, session, default_member_order):
        """last alone returns the tail."""
        paginator = make_paginator(offset_adapter(session, select(Member)), default_member_order)

        connection = await paginator.paginate(PaginateRequest(last=3))

        assert ids(connection) == [98, 99, 100]
        assert connection.page_info.has_next_page is False
        assert connection.page_info.has_previous_page is True

    async def test_ordering_by_request(self, session):
        """Request ordering is applied to the offset query."""
        paginator = make_paginator(
            offset_adapter(session, select(Member)),
            [OrderBy(field="id")],
        )

        connection = await paginator.paginate(
            PaginateRequest(first=3, order_bys=[OrderBy(field="age")])
        )

        assert ids(connection) == [100, 99, 98]
