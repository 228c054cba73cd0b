"""Logging configuration setup.

The library itself only emits records on ``relay_pagination.*`` loggers.
Applications that do not configure logging themselves can call
``setup_logging()`` once at startup to get a console handler driven by
LoggingSettings (LOG_ prefix).
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from relay_pagination.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from relay_pagination.core.settings.logs import LoggingSettings

PACKAGE_LOGGER = "relay_pagination"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_LOGGING_INITIALIZED = False


def configure_logging(
    log_level: str | int = "INFO",
    *,
    json_logs: bool = False,
    service_name: str | None = None,
) -> logging.Logger:
    """Install a single stream handler on the package logger.

    Calling it again replaces the previous handler instead of stacking
    another one.

    Args:
        log_level: Level name or number for the package logger
        json_logs: Emit JSON Lines instead of plain text
        service_name: Static ``service`` field for JSON output

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if getattr(handler, "_relay_pagination", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler._relay_pagination = True  # type: ignore[attr-defined]
    if json_logs:
        static = {"service": service_name} if service_name else None
        handler.setFormatter(JSONFormatter(static=static))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    return package_logger


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from relay_pagination.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    configure_logging(
        settings_obj.level,
        json_logs=settings_obj.json_logs,
        service_name=settings_obj.service_name,
    )
    _LOGGING_INITIALIZED = True
