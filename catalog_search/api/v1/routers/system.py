# catalog_search/api/v1/routers/system.py
from datetime import datetime

from fastapi import APIRouter

from ....config import settings
from ....core.shared.database_service import database_service
from ....models import HealthStatus

router = APIRouter()


@router.get("/health", response_model=HealthStatus, tags=["System"])
async def health_check():
    """Health check endpoint."""
    database = await database_service.health_check()

    return HealthStatus(
        status=database["status"],
        timestamp=datetime.now(),
        version=settings.api_version,
        database=database,
    )
