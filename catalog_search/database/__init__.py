# catalog_search/database/__init__.py
"""
Database package for catalog search.

Provides the catalog relation models, the declarative base and the session
dependency.
"""

from .base import Base, get_db
from .models import (
    Application,
    Dataset,
    DatasetComment,
    DatasetField,
    DatasetFieldComment,
    FieldComment,
    Flow,
    FlowJob,
)

__all__ = [
    "Base",
    "get_db",
    "Application",
    "Dataset",
    "DatasetComment",
    "DatasetField",
    "DatasetFieldComment",
    "FieldComment",
    "Flow",
    "FlowJob",
]
