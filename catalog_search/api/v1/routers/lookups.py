# catalog_search/api/v1/routers/lookups.py
"""Distinct-value lookups used to populate the advanced search form."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ....database.base import get_db
from ....core.search.lookup_service import LookupService, get_lookup_service

logger = logging.getLogger("catalog_search.api.search")

router = APIRouter(prefix="/search/lookups", tags=["lookups"])


@router.get("/sources", response_model=List[str])
async def list_sources(
    db: AsyncSession = Depends(get_db),
    lookups: LookupService = Depends(get_lookup_service),
) -> List[str]:
    """Dataset sources, most frequent first."""
    return await lookups.get_dataset_sources(db)


@router.get("/scopes", response_model=List[str])
async def list_scopes(
    db: AsyncSession = Depends(get_db),
    lookups: LookupService = Depends(get_lookup_service),
) -> List[str]:
    return await lookups.get_dataset_scopes(db)


@router.get("/tables", response_model=List[str])
async def list_tables(
    scopes: Optional[str] = Query(None, description="Comma-separated scopes"),
    db: AsyncSession = Depends(get_db),
    lookups: LookupService = Depends(get_lookup_service),
) -> List[str]:
    return await lookups.get_table_names(db, scopes)


@router.get("/fields", response_model=List[str])
async def list_fields(
    tables: Optional[str] = Query(None, description="Comma-separated table names"),
    db: AsyncSession = Depends(get_db),
    lookups: LookupService = Depends(get_lookup_service),
) -> List[str]:
    return await lookups.get_field_names(db, tables)


@router.get("/appcodes", response_model=List[str])
async def list_app_codes(
    db: AsyncSession = Depends(get_db),
    lookups: LookupService = Depends(get_lookup_service),
) -> List[str]:
    return await lookups.get_flow_app_codes(db)


@router.get("/flows", response_model=List[str])
async def list_flows(
    apps: Optional[str] = Query(None, description="Comma-separated application codes"),
    db: AsyncSession = Depends(get_db),
    lookups: LookupService = Depends(get_lookup_service),
) -> List[str]:
    return await lookups.get_flow_names(db, apps)


@router.get("/jobs", response_model=List[str])
async def list_jobs(
    db: AsyncSession = Depends(get_db),
    lookups: LookupService = Depends(get_lookup_service),
) -> List[str]:
    return await lookups.get_job_names(db)
