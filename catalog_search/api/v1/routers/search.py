# catalog_search/api/v1/routers/search.py
"""
Advanced Search API Router.

Faceted search over datasets and flow/job pairs. The request body is the
filter structure; paging comes from the ``page`` and ``size`` query
parameters. Out-of-range paging values are clamped rather than rejected.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ....core.search.adv_search_service import AdvSearchService, get_adv_search_service
from ....core.search.errors import SearchError, SearchTimeoutError
from ....models import DatasetSearchResponse, FlowJobSearchResponse

logger = logging.getLogger("catalog_search.api.search")

router = APIRouter(prefix="/search", tags=["search"])


def _search_failure(e: SearchError) -> HTTPException:
    if isinstance(e, SearchTimeoutError):
        return HTTPException(status_code=504, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))


@router.post(
    "/datasets",
    response_model=DatasetSearchResponse,
    summary="Search datasets",
    description="Faceted dataset search by scope, table, fields, sources and comment text.",
)
async def search_datasets(
    filters: Any = Body(None, description="Dataset filter structure"),
    page: int = Query(1, description="1-based page number"),
    size: Optional[int] = Query(None, description="Rows per page"),
    service: AdvSearchService = Depends(get_adv_search_service),
) -> DatasetSearchResponse:
    """
    Search datasets.

    Example body:

        {
            "scope": {"in": "tracking"},
            "table": {"in": "PageView", "not": "test"},
            "fields": {"any": "member_id", "all": "", "not": ""},
            "sources": "Hdfs",
            "comments": "deprecated"
        }
    """
    try:
        result = await service.search_datasets(filters, page=page, size=size)
    except SearchError as e:
        logger.error(f"Dataset search failed: {e}")
        raise _search_failure(e)

    return DatasetSearchResponse.model_validate(result.to_dict())


@router.post(
    "/flows",
    response_model=FlowJobSearchResponse,
    summary="Search flows and jobs",
    description="Faceted flow/job search by application code, flow name and job name.",
)
async def search_flows(
    filters: Any = Body(None, description="Flow/job filter structure"),
    page: int = Query(1, description="1-based page number"),
    size: Optional[int] = Query(None, description="Rows per page"),
    service: AdvSearchService = Depends(get_adv_search_service),
) -> FlowJobSearchResponse:
    """Search flows, or flows with their jobs when a ``job`` facet is given."""
    try:
        result = await service.search_flow_jobs(filters, page=page, size=size)
    except SearchError as e:
        logger.error(f"Flow search failed: {e}")
        raise _search_failure(e)

    return FlowJobSearchResponse.model_validate(result.to_dict())
