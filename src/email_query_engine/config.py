"""Configuration management for Email Query Engine.

This module handles engine configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings with environment variable support.

    All settings can be overridden via environment variables with
    the EMAIL_QUERY_ prefix (e.g., EMAIL_QUERY_MAXIMUM_LIMIT).
    """

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_QUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Query Configuration
    maximum_limit: int = Field(
        default=256,
        ge=0,
        description="Page size used when a request has no limit, and the cap for explicit limits",
    )
    max_filter_depth: int = Field(
        default=10,
        ge=1,
        description="Maximum nesting of filter operators accepted in a request",
    )
    preview_length: int = Field(
        default=256,
        ge=0,
        description="Number of characters kept in the 'preview' message property",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached engine settings.

    Returns:
        Settings: Engine settings instance.
    """
    return Settings()
