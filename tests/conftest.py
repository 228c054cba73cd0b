"""Pytest configuration and shared fixtures.

This module provides reusable fixtures for testing across the entire test suite.
Fixtures are organized by category to make them easy to discover and extend.

Organization:
    - Record Fixtures: 100 in-memory user records
    - Finder Fixtures: list-backed keyset and offset finders
    - Settings Fixtures: cache resets for the settings loaders
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any

import pytest

from relay_pagination.core.pagination import OrderBy

# ============================================================================
# Record Fixtures
# ============================================================================


@dataclass(slots=True, frozen=True)
class UserRecord:
    """In-memory user row."""

    id: int
    name: str
    age: int


def make_users(count: int = 100) -> list[UserRecord]:
    """Users with id i+1, name "name{i}" and age 100-i."""
    return [UserRecord(id=i + 1, name=f"name{i}", age=100 - i) for i in range(count)]


@pytest.fixture
def users() -> list[UserRecord]:
    """100 users; ids ascend while ages descend."""
    return make_users()


@pytest.fixture
def default_order() -> list[OrderBy]:
    """Default ordering: id ascending, then age descending."""
    return [OrderBy(field="id"), OrderBy(field="age", desc=True)]


# ============================================================================
# Finder Fixtures
# ============================================================================


def _compare(row: Any, keyset: Mapping[str, Any], order_bys: Sequence[OrderBy]) -> int:
    """Position of row relative to keyset under order_bys (-1, 0, 1)."""
    for order_by in order_bys:
        value, bound = getattr(row, order_by.field), keyset[order_by.field]
        if value == bound:
            continue
        result = -1 if value < bound else 1
        return -result if order_by.desc else result
    return 0


def _sorted(rows: Sequence[Any], order_bys: Sequence[OrderBy], *, reverse: bool = False) -> list[Any]:
    def cmp(a: Any, b: Any) -> int:
        return _compare(a, {o.field: getattr(b, o.field) for o in order_bys}, order_bys)

    return sorted(rows, key=cmp_to_key(cmp), reverse=reverse)


@dataclass
class ListKeysetFinder:
    """KeysetFinder and Counter over a Python list."""

    rows: list[Any]
    calls: list[dict[str, Any]] = field(default_factory=list)
    count_calls: int = 0

    async def find(self, after, before, order_bys, limit, from_last):
        self.calls.append(
            {"after": after, "before": before, "limit": limit, "from_last": from_last}
        )
        rows = _sorted(self.rows, order_bys, reverse=from_last)
        if after is not None:
            rows = [r for r in rows if _compare(r, after, order_bys) > 0]
        if before is not None:
            rows = [r for r in rows if _compare(r, before, order_bys) < 0]
        return rows[:limit]

    async def count(self) -> int:
        self.count_calls += 1
        return len(self.rows)


@dataclass
class ListOffsetFinder:
    """OffsetFinder and Counter over a Python list."""

    rows: list[Any]
    calls: list[tuple[int, int]] = field(default_factory=list)

    async def find(self, order_bys, skip, limit):
        self.calls.append((skip, limit))
        return _sorted(self.rows, order_bys)[skip : skip + limit]

    async def count(self) -> int:
        return len(self.rows)


class BlockingKeysetFinder:
    """Keyset finder whose fetch never completes until cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = False

    async def find(self, after, before, order_bys, limit, from_last):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return []


@pytest.fixture
def keyset_finder(users: list[UserRecord]) -> ListKeysetFinder:
    """List-backed keyset finder over the 100 users."""
    return ListKeysetFinder(users)


@pytest.fixture
def empty_keyset_finder() -> ListKeysetFinder:
    """Keyset finder over an empty store."""
    return ListKeysetFinder([])


@pytest.fixture
def offset_finder(users: list[UserRecord]) -> ListOffsetFinder:
    """List-backed offset finder over the 100 users."""
    return ListOffsetFinder(users)


@pytest.fixture
def blocking_finder() -> BlockingKeysetFinder:
    """Keyset finder that blocks until its task is cancelled."""
    return BlockingKeysetFinder()


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def clear_settings_cache():
    """Reset cached settings before and after a test."""
    from relay_pagination.core.settings import get_logging_settings, get_pagination_settings

    get_pagination_settings.cache_clear()
    get_logging_settings.cache_clear()
    yield
    get_pagination_settings.cache_clear()
    get_logging_settings.cache_clear()
