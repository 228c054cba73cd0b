"""GraphQL feature module using Strawberry.

This module provides Relay-compliant pagination building blocks for
Strawberry schemas: PageInfo output, pagination and ordering inputs.
"""

from __future__ import annotations

from relay_pagination.features.graphql.types import (
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
