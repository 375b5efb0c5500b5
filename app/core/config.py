"""
Core configuration module using Pydantic Settings.
Supports environment variables and .env files.
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from app.schemas.transaction import AdjustmentDirection


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"
    )

    # Application
    app_name: str = Field(default="Inventory Ledger", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database
    database_url: str = Field(
        default="sqlite:///./data/inventory.db",
        alias="DATABASE_URL"
    )
    db_echo: bool = Field(default=False, alias="DB_ECHO")
    db_pool_size: int = Field(default=20, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=40, alias="DB_MAX_OVERFLOW")

    # Access (credentials checked in front of the engine)
    admin_username: str = Field(default="admin", alias="ADMIN_USERNAME")
    admin_password: str = Field(default="change-this-in-production", alias="ADMIN_PASSWORD")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        alias="CORS_ORIGINS"
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="./logs", alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_per_minute: int = Field(default=60, alias="RATE_LIMIT_PER_MINUTE")

    # Stock reconciliation
    reconcile_max_attempts: int = Field(default=5, ge=1, le=20, alias="RECONCILE_MAX_ATTEMPTS")
    # Unset means adjustments must state a direction
    default_adjustment_direction: Optional[AdjustmentDirection] = Field(
        default=None,
        alias="DEFAULT_ADJUSTMENT_DIRECTION"
    )

    # Listings
    activity_feed_limit: int = Field(default=100, ge=1, alias="ACTIVITY_FEED_LIMIT")
    transactions_page_size: int = Field(default=50, ge=1, alias="TRANSACTIONS_PAGE_SIZE")

    @field_validator("default_adjustment_direction", mode="before")
    @classmethod
    def blank_direction_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Dependency injection for FastAPI."""
    return settings
