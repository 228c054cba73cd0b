"""Keyset cursors and the keyset apply-cursors adapter.

A keyset cursor holds the values of the ordering fields of one record,
so the next query can seek directly past it instead of scanning an OFFSET.

The cursor format is a compact JSON object with sorted keys:
    {"age":85,"id":16}

Equal keysets always produce byte-identical cursors. Obfuscation (base64,
encryption) is layered on top by cursor transforms.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError, to_jsonable_python

from relay_pagination.core.exceptions import (
    CursorEncodeError,
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
    from collections.abc import Sequence

    from relay_pagination.core.pagination.finders import Counter, KeysetFinder

logger = get_lazy_logger(__name__)


def _project(node: Any, keys: Sequence[str]) -> dict[str, Any]:
    """Pick the key fields out of a node's field-name keyed form."""
    if isinstance(node, Mapping):
        source: Mapping[str, Any] = node
    elif isinstance(node, BaseModel):
        source = node.model_dump()
    elif dataclasses.is_dataclass(node) and not isinstance(node, type):
        source = {f.name: getattr(node, f.name) for f in dataclasses.fields(node)}
    else:
        source = {key: getattr(node, key) for key in keys if hasattr(node, key)}

    missing = [key for key in keys if key not in source]
    if missing:
        raise CursorEncodeError(
            "key fields not found on node",
            details={"node_type": type(node).__name__, "missing": missing},
        )
    return {key: source[key] for key in keys}


def encode_keyset_cursor(node: Any, keys: Sequence[str]) -> str:
    """Encode the key fields of a node as a keyset cursor.

    Args:
        node: Mapping, pydantic model, dataclass or attribute object
        keys: Ordering field names to capture

    Returns:
        Compact JSON object string with sorted keys

    Raises:
        CursorEncodeError: If a key is missing or a value is not serializable

    Example:
        >>> encode_keyset_cursor({"id": 1, "name": "molon"}, ["id"])
        '{"id":1}'
    """
    values = _project(node, keys)
    try:
        payload = to_jsonable_python(values)
    except PydanticSerializationError as e:
        raise CursorEncodeError(
            f"key values are not serializable: {e}",
            details={"node_type": type(node).__name__},
        ) from e
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def decode_keyset_cursor(cursor: str, keys: Sequence[str]) -> dict[str, Any]:
    """Decode a keyset cursor and check it against the expected keys.

    Args:
        cursor: Keyset cursor string
        keys: Ordering field names the cursor must contain, exactly

    Returns:
        Keyset mapping field name to decoded JSON value

    Raises:
        InvalidCursorError: If the cursor is malformed or holds other keys
    """
    try:
        keyset = json.loads(cursor)
    except (TypeError, ValueError) as e:
        raise InvalidCursorError("malformed keyset cursor") from e

    if not isinstance(keyset, dict):
        raise InvalidCursorError("keyset cursor is not an object")
    if len(keyset) != len(keys):
        raise InvalidCursorError(
            "cursor length != keys length",
            details={"expected": len(keys), "actual": len(keyset)},
        )
    for key in keys:
        if key not in keyset:
            raise InvalidCursorError(f"key {key!r} not found in cursor")
    return keyset


def decode_keyset_cursors(
    after: str | None,
    before: str | None,
    keys: Sequence[str],
) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
    """Decode both request boundaries.

    Raises:
        InvalidPaginationRequestError: If both boundaries are the same keyset
        InvalidCursorError: If either cursor fails to decode
    """
    if after is not None and before is not None and after == before:
        raise InvalidPaginationRequestError("after == before", field="after")

    after_keyset = before_keyset = None
    if after is not None:
        try:
            after_keyset = decode_keyset_cursor(after, keys)
        except InvalidCursorError as e:
            raise e.with_boundary("after") from e
    if before is not None:
        try:
            before_keyset = decode_keyset_cursor(before, keys)
        except InvalidCursorError as e:
            raise e.with_boundary("before") from e

    if after_keyset is not None and after_keyset == before_keyset:
        raise InvalidPaginationRequestError("after == before", field="after")
    return after_keyset, before_keyset


class KeysetAdapter[T]:
    """Apply-cursors callable backed by a KeysetFinder.

    Decodes the request cursors into keysets, optionally counts, fetches
    and attaches a lazy keyset cursor to every edge.

    Without a counter the boundary flags only report that a cursor was
    supplied; checking that rows really exist beyond it would cost an
    extra query per boundary.

    Example:
        finder = SQLAlchemyKeysetFinder(session, select(User))
        paginator = Paginator(
            KeysetAdapter(finder, counter=finder),
            max_limit=100,
            limit_if_not_set=20,
            order_bys_if_not_set=[OrderBy(field="id")],
        )
    """

    __slots__ = ("counter", "finder")

    def __init__(self, finder: KeysetFinder[T], counter: Counter | None = None) -> None:
        """Initialize adapter.

        Args:
            finder: Store capability performing the bounded, ordered fetch
            counter: Optional total-count capability
        """
        self.finder = finder
        self.counter = counter

    async def __call__(self, request: ApplyCursorsRequest) -> ApplyCursorsResponse[T]:
        keys = [order_by.field for order_by in request.order_bys]
        after, before = decode_keyset_cursors(request.after, request.before, keys)

        total_count = 0
        if self.counter is not None:
            total_count = await self.counter.count()

        nodes: list[T] = []
        if request.limit > 0 and (self.counter is None or total_count > 0):
            nodes = list(
                await self.finder.find(
                    after,
                    before,
                    request.order_bys,
                    request.limit,
                    request.from_last,
                )
            )
            if request.from_last:
                nodes.reverse()

        logger.debug(
            lambda: (
                f"keyset.apply_cursors: keys={keys} limit={request.limit} "
                f"from_last={request.from_last} -> {len(nodes)} nodes, total={total_count}"
            )
        )

        return ApplyCursorsResponse(
            edges=[
                LazyEdge(node=node, cursor=partial(encode_keyset_cursor, node, keys))
                for node in nodes
            ],
            total_count=total_count,
            has_after_or_previous=after is not None,
            has_before_or_next=before is not None,
        )


__all__ = [
    "KeysetAdapter",
    "decode_keyset_cursor",
    "decode_keyset_cursors",
    "encode_keyset_cursor",
]
