"""Cursor transforms wrapping an apply-cursors callable.

A transform changes only how cursors look on the wire. Incoming
``after``/``before`` cursors are decoded before the inner callable sees
them, and every emitted edge cursor is encoded on the way out. Total count,
boundary flags and errors of the inner callable pass through untouched.

Transforms compose by explicit chaining at setup time:

    apply_cursors = chain_cursor_transforms(
        KeysetAdapter(finder, counter=finder),
        EncryptedCursorTransform(settings.cursor_secret_key.get_secret_value()),
    )

The first transform in the chain is the innermost one.
"""

from __future__ import annotations

import base64
import binascii
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import TYPE_CHECKING

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

from relay_pagination.core.exceptions import InvalidCursorError
from relay_pagination.core.pagination.schemas import (
    ApplyCursorsRequest,
    ApplyCursorsResponse,
    LazyEdge,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from relay_pagination.core.exceptions import Boundary
    from relay_pagination.core.pagination.schemas import ApplyCursorsFunc


class CursorTransform(ABC):
    """Reversible string transform applied to cursors.

    Subclasses implement ``encode`` and ``decode``. ``decode`` raises
    InvalidCursorError for anything it did not produce.
    """

    @abstractmethod
    def encode(self, cursor: str) -> str:
        """Transform a plain cursor into its wire form."""
        ...

    @abstractmethod
    def decode(self, cursor: str) -> str:
        """Recover the plain cursor from its wire form.

        Raises:
            InvalidCursorError: If the cursor was not produced by ``encode``
        """
        ...

    def wrap[T](self, apply_cursors: ApplyCursorsFunc[T]) -> TransformedApplyCursors[T]:
        """Wrap an apply-cursors callable with this transform."""
        return TransformedApplyCursors(apply_cursors, self)


class TransformedApplyCursors[T]:
    """Apply-cursors callable decorated with a cursor transform."""

    __slots__ = ("inner", "transform")

    def __init__(self, inner: ApplyCursorsFunc[T], transform: CursorTransform) -> None:
        self.inner = inner
        self.transform = transform

    def _decode(self, cursor: str | None, boundary: Boundary) -> str | None:
        if cursor is None:
            return None
        try:
            return self.transform.decode(cursor)
        except InvalidCursorError as e:
            raise e.with_boundary(boundary) from e

    def _encoded(self, cursor: Callable[[], str]) -> Callable[[], str]:
        encode = self.transform.encode
        return lambda: encode(cursor())

    async def __call__(self, request: ApplyCursorsRequest) -> ApplyCursorsResponse[T]:
        inner_request = replace(
            request,
            after=self._decode(request.after, "after"),
            before=self._decode(request.before, "before"),
        )
        response = await self.inner(inner_request)
        response.edges = [
            LazyEdge(node=edge.node, cursor=self._encoded(edge.cursor))
            for edge in response.edges
        ]
        return response


class Base64CursorTransform(CursorTransform):
    """URL-safe base64 framing of cursors.

    Example:
        >>> Base64CursorTransform().encode('{"id":1}')
        'eyJpZCI6MX0='
    """

    def encode(self, cursor: str) -> str:
        return base64.urlsafe_b64encode(cursor.encode("utf-8")).decode("ascii")

    def decode(self, cursor: str) -> str:
        try:
            raw = base64.b64decode(cursor.encode("ascii"), altchars=b"-_", validate=True)
            return raw.decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise InvalidCursorError("malformed base64 cursor") from e


class EncryptedCursorTransform(CursorTransform):
    """Authenticated symmetric encryption of cursors using Fernet.

    Fernet tokens are AES-128-CBC with an HMAC-SHA256 tag, so a tampered
    cursor or one minted under another key fails to decode. Several keys
    may be given for rotation: the first encrypts, all of them decrypt.

    Example:
        key = Fernet.generate_key()
        transform = EncryptedCursorTransform(key, ttl=3600)
    """

    def __init__(
        self,
        key: str | bytes | Sequence[str | bytes],
        *,
        ttl: int | None = None,
    ) -> None:
        """Initialize encrypted transform.

        Args:
            key: Fernet key, or list of keys (newest first) for rotation
            ttl: Maximum cursor age in seconds (None disables expiry)

        Raises:
            ValueError: If a key is not a valid Fernet key
        """
        keys = [key] if isinstance(key, str | bytes) else list(key)
        if not keys:
            msg = "at least one Fernet key is required"
            raise ValueError(msg)
        fernets = [Fernet(k.encode("utf-8") if isinstance(k, str) else k) for k in keys]
        self._fernet = MultiFernet(fernets)
        self.ttl = ttl

    def encode(self, cursor: str) -> str:
        return self._fernet.encrypt(cursor.encode("utf-8")).decode("ascii")

    def decode(self, cursor: str) -> str:
        try:
            token = cursor.encode("ascii")
            return self._fernet.decrypt(token, ttl=self.ttl).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            raise InvalidCursorError("cursor could not be decrypted") from e


def chain_cursor_transforms[T](
    apply_cursors: ApplyCursorsFunc[T],
    *transforms: CursorTransform,
) -> ApplyCursorsFunc[T]:
    """Wrap an apply-cursors callable with transforms, innermost first."""
    for transform in transforms:
        apply_cursors = transform.wrap(apply_cursors)
    return apply_cursors


__all__ = [
    "Base64CursorTransform",
    "CursorTransform",
    "EncryptedCursorTransform",
    "TransformedApplyCursors",
    "chain_cursor_transforms",
]
