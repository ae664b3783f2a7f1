# catalog_search/core/shared/__init__.py
"""Shared infrastructure services."""

from .database_service import DatabaseService, database_service

__all__ = ["DatabaseService", "database_service"]
