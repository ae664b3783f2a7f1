# catalog_search/__init__.py
"""Catalog Search - faceted advanced search over a metadata catalog."""

__version__ = "1.0.0"
__title__ = "Catalog Search API"
__description__ = "Faceted dataset and flow/job search with ranked, exactly counted pages"
