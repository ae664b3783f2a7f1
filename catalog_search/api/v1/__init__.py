from fastapi import APIRouter

# Aggregate all v1 routers here
from .routers import lookups, search, system

api_router = APIRouter()
api_router.include_router(search.router)
api_router.include_router(lookups.router)
api_router.include_router(system.router)

__all__ = ["api_router"]
