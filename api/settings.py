"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here with proper typing, validation,
and sensible defaults. Settings are loaded once at startup and cached.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development.
    Production values should be set via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Store ===
    store_backend: str = Field(
        default="memory",
        description="Person store backend: 'memory' or 'pocketbase'",
    )

    # === PocketBase Configuration ===
    pocketbase_url: str = Field(
        default="http://127.0.0.1:8090",
        description="PocketBase server URL",
    )
    pocketbase_admin_email: str = Field(
        default="admin@hobbygraph.local",
        description="PocketBase admin email for API authentication",
    )
    pocketbase_admin_password: str = Field(
        default="",
        description="PocketBase admin password (required when store_backend=pocketbase)",
    )
    persons_collection: str = Field(
        default="persons",
        description="PocketBase collection holding person records",
    )

    # === Mutation Engine ===
    lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Longest wait for an operation's per-person locks",
    )
    max_commit_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for each optimistic version-checked commit",
    )

    # === Graph View ===
    high_tier_threshold: float = Field(
        default=5.0,
        description="Popularity above which a node is labeled 'high' tier",
    )

    # === CORS Configuration ===
    # Note: Use str type for env var parsing, convert to list via property
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins string into list."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    @field_validator("store_backend", mode="after")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Validate and normalize store_backend."""
        v = v.lower()
        if v not in ("memory", "pocketbase"):
            raise ValueError(f"Invalid STORE_BACKEND: {v}. Must be 'memory' or 'pocketbase'")
        return v

    @field_validator("pocketbase_admin_password", mode="after")
    @classmethod
    def validate_admin_password(cls, v: str) -> str:
        """Warn when the admin password is unset or an obvious default."""
        if v in {"password", "admin", "123456", ""}:
            logger.warning(
                "SECURITY WARNING: POCKETBASE_ADMIN_PASSWORD is not set or uses an insecure default. "
                "Set a strong password in your .env file before using the pocketbase store."
            )
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    Use this function to access settings throughout the codebase.
    """
    return Settings()
