"""Cursor-based pagination with GraphQL Connection and REST styles.

This package provides a Relay pagination engine that is:
- Exact: fetches one surplus row to prove whether more pages exist
- Pluggable: keyset or offset cursors behind one apply-cursors interface
- Store-agnostic: any backend implementing a finder protocol works

Keyset pagination:
    finder = SQLAlchemyKeysetFinder(session, select(User))
    paginator = Paginator(
        KeysetAdapter(finder, counter=finder),
        max_limit=100,
        limit_if_not_set=20,
        order_bys_if_not_set=[OrderBy(field="id")],
    )
    connection = await paginator.paginate(PaginateRequest(first=10))

Offset pagination:
    paginator = Paginator(OffsetAdapter(finder, counter=finder), ...)

Opaque or encrypted cursors:
    apply_cursors = chain_cursor_transforms(
        KeysetAdapter(finder),
        EncryptedCursorTransform(key),
    )
"""

from relay_pagination.core.pagination.finders import (
    Counter,
    KeysetFinder,
    OffsetCursorParser,
    OffsetFinder,
)
from relay_pagination.core.pagination.keyset import (
    KeysetAdapter,
    decode_keyset_cursor,
    encode_keyset_cursor,
)
from relay_pagination.core.pagination.offset import (
    Base64OffsetParser,
    OffsetAdapter,
)
from relay_pagination.core.pagination.paginator import Paginator
from relay_pagination.core.pagination.schemas import (
    ApplyCursorsFunc,
    ApplyCursorsRequest,
    ApplyCursorsResponse,
    Connection,
    CursorPage,
    Edge,
    LazyEdge,
    OrderBy,
    PageInfo,
    PaginateRequest,
)
from relay_pagination.core.pagination.transforms import (
    Base64CursorTransform,
    CursorTransform,
    EncryptedCursorTransform,
    chain_cursor_transforms,
)

__all__ = [
    # Adapter contract
    "ApplyCursorsFunc",
    "ApplyCursorsRequest",
    "ApplyCursorsResponse",
    # Transforms
    "Base64CursorTransform",
    # Offset cursors
    "Base64OffsetParser",
    # GraphQL-style schemas
    "Connection",
    # Store capabilities
    "Counter",
    # REST-style schemas
    "CursorPage",
    "CursorTransform",
    "Edge",
    "EncryptedCursorTransform",
    # Keyset cursors
    "KeysetAdapter",
    "KeysetFinder",
    "LazyEdge",
    "OffsetAdapter",
    "OffsetCursorParser",
    "OffsetFinder",
    "OrderBy",
    "PageInfo",
    "PaginateRequest",
    # Engine
    "Paginator",
    "chain_cursor_transforms",
    "decode_keyset_cursor",
    "encode_keyset_cursor",
]
