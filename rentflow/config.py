"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RentFlow"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database
    database_url: Optional[str] = None  # full override, e.g. sqlite+aiosqlite:///./rentflow.db
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "rentflow"
    postgres_password: str = Field(default="rentflow_secret")
    postgres_db: str = "rentflow"
    db_pool_size: int = 20
    db_max_overflow: int = 10
    db_echo: bool = False

    @computed_field
    @property
    def sqlalchemy_database_url(self) -> str:
        """Async connection URL used by the engine."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # JWT Authentication
    jwt_secret_key: str = Field(default="change-me-in-production")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    password_reset_expire_minutes: int = 10

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Pricing (percentages; deposit is a fraction of one period's price)
    pricing_discount_percent: float = 10.0
    pricing_tax_percent: float = 9.0
    pricing_deposit_rate: float = 0.5

    # Notifications
    notification_ttl_days: int = 30
    notification_purge_enabled: bool = True
    notification_purge_interval_seconds: int = 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
