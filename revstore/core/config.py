"""Application configuration using Pydantic Settings"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "REVSTORE"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def is_debug(self) -> bool:
        """Debug mode is derived from environment (non-production = debug)."""
        return self.environment != "production"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    # Embedded SQLite by default. Any SQLAlchemy async URL works
    # (e.g. postgresql+asyncpg://...) for a shared deployment.
    database_url: str = Field(default="sqlite+aiosqlite:///./revstore.db")
    # Pool settings (ignored for SQLite)
    db_pool_size: int = 5
    db_pool_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800  # 30 minutes

    # Revision tokens
    # "timestamp": rev_<ms>_<random base36>, sortable by creation time
    # "uuid": rev_<uuid4 hex>, collision resistant
    revision_id_scheme: Literal["timestamp", "uuid"] = "timestamp"

    # History pagination cap for the HTTP layer
    history_max_limit: int = Field(default=500, ge=1)

    # CORS (stored as string, parsed to list)
    cors_origins: str = Field(default="http://localhost:3000")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate storage settings in production environment.

        History must survive restarts, so the database has to be configured
        explicitly and cannot live in memory.
        """
        if self.environment == "production":
            if not os.environ.get("DATABASE_URL"):
                raise ValueError(
                    "DATABASE_URL must be explicitly set in production environment."
                )
            if ":memory:" in self.database_url:
                raise ValueError(
                    "An in-memory database cannot be used in production: "
                    "revision history would be lost on restart."
                )
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
