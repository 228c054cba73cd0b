"""SQLAlchemy backing store for the pagination engine.

Query Filters:
    - KeysetFilter: Seek predicate past (or before) a keyset
    - OrderByFilter: Pagination ordering, optionally reversed
    - LimitOffset: LIMIT/OFFSET helper

Finders:
    - SQLAlchemyKeysetFinder: KeysetFinder + Counter over a select statement
    - SQLAlchemyOffsetFinder: OffsetFinder + Counter over a select statement
    - keyset_adapter / offset_adapter: ready-made apply-cursors callables

Example:
    from sqlalchemy import select
    from relay_pagination.core.database import keyset_adapter

    apply_cursors = keyset_adapter(session, select(User))
"""

from __future__ import annotations

from relay_pagination.core.database.filters import (
    KeysetFilter,
    LimitOffset,
    OrderByFilter,
    OrderColumn,
    StatementFilter,
    convert_keyset_value,
)
from relay_pagination.core.database.finders import (
    SQLAlchemyFinder,
    SQLAlchemyKeysetFinder,
    SQLAlchemyOffsetFinder,
    keyset_adapter,
    offset_adapter,
    statement_entity,
)

__all__ = [
    # Filters
    "KeysetFilter",
    "LimitOffset",
    "OrderByFilter",
    "OrderColumn",
    # Finders
    "SQLAlchemyFinder",
    "SQLAlchemyKeysetFinder",
    "SQLAlchemyOffsetFinder",
    "StatementFilter",
    "convert_keyset_value",
    "keyset_adapter",
    "offset_adapter",
    "statement_entity",
]
