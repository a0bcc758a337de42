"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, computed_field, model_validator
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
    app_name: str = "CarZone"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "carzone"
    postgres_password: str = Field(default="carzone_secret")
    postgres_db: str = "carzone"
    db_pool_size: int = 20
    db_max_overflow: int = 10
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    @computed_field
    @property
    def database_url(self) -> str:
        """Async PostgreSQL connection URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync PostgreSQL connection URL for Alembic."""
        if self.database_url_override:
            return self.database_url_override.replace("+asyncpg", "")
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Payment gateway (Razorpay)
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    razorpay_base_url: str = "https://api.razorpay.com"
    gateway_timeout_seconds: float = 30.0
    payment_currency: str = "INR"

    # Accept "test_signature_*" values in payment verification.
    # Never allowed in production.
    allow_test_signatures: bool = False

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    @model_validator(mode="after")
    def _forbid_test_signatures_in_production(self) -> "Settings":
        if self.allow_test_signatures and self.environment == "production":
            raise ValueError("allow_test_signatures cannot be enabled in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
