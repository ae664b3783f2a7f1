# ============================================================================
# Catalog Search - Application Configuration
# ============================================================================
"""
Application configuration module using Pydantic Settings.

This module defines all configuration parameters for the catalog search
service, including:
- API/CORS settings
- Database connection and pooling
- Search paging limits and statement timeout

Environment Variables:
    See .env.example for a complete list of available settings.

Usage:
    from catalog_search.config import settings
    page_size = settings.search_default_page_size
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # API SETTINGS
    # =========================================================================
    api_title: str = "Catalog Search API"
    api_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable verbose logging & SQL echo")

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed origins for CORS",
    )

    # =========================================================================
    # DATABASE CONFIGURATION
    # =========================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/catalog.db",
        description="Async SQLAlchemy URL (mysql+aiomysql, postgresql+asyncpg, sqlite+aiosqlite)",
    )
    db_pool_size: int = Field(default=20, description="Connections kept in the pool")
    db_max_overflow: int = Field(default=40, description="Extra connections allowed during peak load")
    db_pool_recycle: int = Field(default=3600, description="Recycle connections after N seconds")

    # =========================================================================
    # SEARCH CONFIGURATION
    # =========================================================================
    search_default_page_size: int = Field(default=10, description="Page length when none is given")
    search_max_page_size: int = Field(default=100, description="Upper bound on requested page length")
    search_timeout_seconds: float = Field(
        default=30.0, description="Timeout (s) for one search call (primary + count statements)"
    )


# Global settings instance (imported elsewhere)
settings = Settings()
