# catalog_search/core/shared/database_service.py
"""
Database service for async SQLAlchemy session management.

Provides a singleton service for managing database connections,
sessions, and health checks. The catalog normally lives in MySQL; PostgreSQL
and SQLite (development and tests) are supported as well.

Usage:
    from catalog_search.core.shared.database_service import database_service

    # Get async session (context manager)
    async with database_service.get_session() as session:
        result = await session.execute(text("SELECT 1"))

    # Initialize database (create catalog tables)
    await database_service.init_db()

    # Health check
    health = await database_service.health_check()

Pool Configuration:
    Connection pooling is configured via settings / environment variables:
    - DB_POOL_SIZE: Number of connections to maintain (default: 20)
    - DB_MAX_OVERFLOW: Extra connections allowed during peak load (default: 40)
    - DB_POOL_RECYCLE: Recycle connections after N seconds (default: 3600)
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog_search.config import settings
from catalog_search.database.base import Base


class DatabaseService:
    """
    Database service for managing async SQLAlchemy sessions.

    Singleton with a global instance. Each search call takes exactly one
    session scope from here; the scope owns one pooled connection and one
    transaction for its whole lifetime.

    Attributes:
        _engine: Async SQLAlchemy engine
        _session_factory: Async session factory
        _logger: Logger instance

    Methods:
        get_session(): Get async database session (context manager)
        init_db(): Initialize database (create catalog tables)
        health_check(): Check database connectivity
        close(): Close database engine and connections
    """

    def __init__(self, database_url: Optional[str] = None):
        """
        Initialize database service.

        Args:
            database_url: Async SQLAlchemy URL; defaults to ``settings.database_url``
        """
        self._logger = logging.getLogger("catalog_search.database")
        self._database_url = database_url or settings.database_url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None
        self._initialize_engine()

    def _initialize_engine(self) -> None:
        """
        Initialize database engine based on the configured URL.

        SQLite Configuration:
            - Uses aiosqlite async driver
            - check_same_thread=False for async support
            - Creates data directory if needed

        MySQL / PostgreSQL Configuration:
            - Connection pooling with configurable size
            - Pool pre-ping for connection health validation
            - Pool recycle to prevent stale connections
        """
        database_url = self._database_url

        # Log connection info (hide credentials)
        safe_url = database_url.split("@")[-1] if "@" in database_url else database_url
        self._logger.info(f"Initializing catalog database: {safe_url.split('?')[0]}")

        if database_url.startswith("sqlite"):
            if ":///" in database_url:
                db_path = database_url.split("///")[1].split("?")[0]
                db_dir = os.path.dirname(db_path)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    self._logger.info(f"Created database directory: {db_dir}")

            self._engine = create_async_engine(
                database_url,
                connect_args={"check_same_thread": False},
                pool_pre_ping=True,
                echo=settings.debug,
            )
            self._logger.info("Using SQLite database (development mode)")
        else:
            self._engine = create_async_engine(
                database_url,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=True,  # Validate connections before use
                pool_recycle=settings.db_pool_recycle,
                echo=settings.debug,
            )
            self._logger.info(
                f"Connection pool: size={settings.db_pool_size}, "
                f"max_overflow={settings.db_max_overflow}, recycle={settings.db_pool_recycle}s"
            )

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        if not self._engine:
            raise RuntimeError("Database engine not initialized")
        return self._engine

    @property
    def dialect_name(self) -> str:
        """Dialect of the configured engine (``mysql``, ``postgresql``, ``sqlite``)."""
        return self.engine.dialect.name

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get async database session as context manager.

        Automatically handles commit on success and rollback on error.

        Usage:
            async with database_service.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                # Session automatically committed on exit

        Yields:
            AsyncSession: Async database session

        Raises:
            RuntimeError: If database is not initialized
            Exception: Any database errors (triggers rollback)
        """
        if not self._session_factory:
            raise RuntimeError("Database not initialized")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def init_db(self) -> None:
        """
        Create the catalog tables if they don't exist.

        Safe to call multiple times. Production catalogs are provisioned by
        the ingestion side; this is for development databases and tests.
        """
        self._logger.info("Creating catalog tables...")

        async with self.engine.begin() as conn:
            # Import all models to ensure they're registered with Base
            from catalog_search.database import models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

        self._logger.info("Catalog tables created successfully")

    async def health_check(self) -> Dict[str, Any]:
        """
        Check database connectivity.

        Returns:
            Dict with health status:
                {
                    "status": "healthy" | "unhealthy",
                    "connected": True | False,
                    "database_type": "mysql" | "postgresql" | "sqlite",
                    "datasets": int (when the catalog is reachable),
                    "error": "error message" (if unhealthy),
                }
        """
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
                result = await session.execute(text("SELECT COUNT(*) FROM dict_dataset"))
                datasets = result.scalar() or 0

            return {
                "status": "healthy",
                "connected": True,
                "database_type": self.dialect_name,
                "datasets": datasets,
            }

        except Exception as e:
            self._logger.error(f"Database health check failed: {str(e)}")
            return {
                "status": "unhealthy",
                "connected": False,
                "database_type": self.dialect_name,
                "error": str(e),
            }

    async def close(self) -> None:
        """
        Close database engine and all connections.

        Should be called on application shutdown to gracefully close
        all database connections.
        """
        if self._engine:
            await self._engine.dispose()
            self._logger.info("Database connections closed")

    def __repr__(self) -> str:
        return f"<DatabaseService(type={self.dialect_name})>"


# Global singleton instance
database_service = DatabaseService()
