"""Logging infrastructure.

Basic usage:
    import logging

    logger = logging.getLogger(__name__)
    logger.info("Paginator configured")

    # Lazy evaluation for expensive operations
    from relay_pagination.infra.logging import get_lazy_logger

    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Edges: {dump_edges(edges)}")  # Only runs if DEBUG enabled

    # One-time console setup from LOG_* settings
    from relay_pagination.infra.logging import setup_logging

    setup_logging()
"""

from relay_pagination.infra.logging.config import configure_logging, setup_logging
from relay_pagination.infra.logging.formatters import JSONFormatter
from relay_pagination.infra.logging.lazy import (
    LazyLoggerAdapter,
    LazyString,
    get_lazy_logger,
    lazy,
)

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "LazyString",
    "configure_logging",
    "get_lazy_logger",
    "lazy",
    "setup_logging",
]
