"""Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from relay_pagination.core.settings import get_pagination_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables (PAGINATION_*, LOG_*)
    3. .env file (development only)
"""

from __future__ import annotations

from .loader import get_logging_settings, get_pagination_settings
from .logs import LoggingSettings
from .pagination import PaginationSettings

__all__ = [
    "LoggingSettings",
    "PaginationSettings",
    "get_logging_settings",
    "get_pagination_settings",
]
