"""GraphQL type definitions.

This package contains Strawberry types for:
- Relay PageInfo
- Pagination and ordering inputs
"""

from __future__ import annotations

from relay_pagination.features.graphql.types.pagination import (
    OrderByInput,
    PageInfoType,
    PaginationInput,
    to_page_info_type,
)

__all__ = [
    "OrderByInput",
    "PageInfoType",
    "PaginationInput",
    "to_page_info_type",
]
