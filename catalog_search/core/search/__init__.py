# catalog_search/core/search/__init__.py
"""
Advanced search package.

Filter specs are normalized (``filter_spec``), compiled into parameterized
SQL (``predicates``, ``field_conjunction``, ``full_text``, ``ranking``,
``compiler``) and executed with an exact total count (``executor``).
``adv_search_service`` and ``lookup_service`` are the entry points.
"""

from .adv_search_service import AdvSearchService, adv_search_service, get_adv_search_service
from .errors import SearchError, SearchExecutionError, SearchTimeoutError
from .lookup_service import LookupService, get_lookup_service, lookup_service
from .results import DatasetResult, FlowJobResult, ResultPage

__all__ = [
    "AdvSearchService",
    "adv_search_service",
    "get_adv_search_service",
    "LookupService",
    "lookup_service",
    "get_lookup_service",
    "SearchError",
    "SearchExecutionError",
    "SearchTimeoutError",
    "DatasetResult",
    "FlowJobResult",
    "ResultPage",
]
