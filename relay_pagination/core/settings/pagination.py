"""Pagination settings.

This module provides configurable defaults for paginators. Having
centralized pagination settings ensures consistency and allows easy tuning
based on performance requirements.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_LIMIT=50, PAGINATION_MAX_LIMIT=100,
PAGINATION_CURSOR_ENCODING=encrypted, PAGINATION_CURSOR_SECRET_KEY=...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from relay_pagination.core.pagination.transforms import CursorTransform

CursorEncoding = Literal["plain", "base64", "encrypted"]


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_limit: Page size when neither first nor last is given.
        max_limit: Maximum allowed first/last (hard limit).
        nodes_only: Skip cursor materialization for every page.
        cursor_encoding: Wire form of emitted cursors.
        cursor_secret_key: Fernet key(s) for encrypted cursors, comma separated
            for rotation (newest first).
        cursor_ttl_seconds: Maximum age of an encrypted cursor.

    Example:
        settings = PaginationSettings()
        paginator = Paginator.from_settings(apply_cursors, [OrderBy(field="id")], settings)
    """

    default_limit: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Default page size when first/last not specified",
    )
    max_limit: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum allowed page size (hard limit)",
    )
    nodes_only: bool = Field(
        default=False,
        description="Return nodes without cursors",
    )
    cursor_encoding: CursorEncoding = Field(
        default="base64",
        description="Cursor wire format (plain|base64|encrypted)",
    )
    cursor_secret_key: SecretStr | None = Field(
        default=None,
        description="Fernet key(s) for encrypted cursors, comma separated",
    )
    cursor_ttl_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Maximum age of encrypted cursors in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_limits(self) -> PaginationSettings:
        """Ensure limits and encryption settings are coherent."""
        if self.max_limit < self.default_limit:
            msg = "max_limit must be greater than or equal to default_limit"
            raise ValueError(msg)
        if self.cursor_encoding == "encrypted" and self.cursor_secret_key is None:
            msg = "cursor_secret_key is required when cursor_encoding is 'encrypted'"
            raise ValueError(msg)
        return self

    @property
    def cursor_keys(self) -> list[str]:
        """Fernet keys parsed from cursor_secret_key."""
        if self.cursor_secret_key is None:
            return []
        raw = self.cursor_secret_key.get_secret_value()
        return [key.strip() for key in raw.split(",") if key.strip()]

    def build_cursor_transforms(self) -> list[CursorTransform]:
        """Cursor transforms for the configured encoding, innermost first."""
        from relay_pagination.core.pagination.transforms import (
            Base64CursorTransform,
            EncryptedCursorTransform,
        )

        if self.cursor_encoding == "base64":
            return [Base64CursorTransform()]
        if self.cursor_encoding == "encrypted":
            return [EncryptedCursorTransform(self.cursor_keys, ttl=self.cursor_ttl_seconds)]
        return []
