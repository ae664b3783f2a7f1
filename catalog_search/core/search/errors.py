# catalog_search/core/search/errors.py
"""Exceptions raised by the advanced search service."""


class SearchError(Exception):
    """Base class for advanced search failures."""


class SearchExecutionError(SearchError):
    """A compiled statement failed in the database; the transaction was rolled back."""


class SearchTimeoutError(SearchError):
    """The primary and count statements did not finish within the configured timeout."""
