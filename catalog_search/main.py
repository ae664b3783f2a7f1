# ============================================================================
# Catalog Search - FastAPI Application Entry Point
# ============================================================================
"""
Main FastAPI application module for Catalog Search.

This module sets up the FastAPI application with:
- CORS middleware configuration for cross-origin requests
- Application startup/shutdown event handlers
- Error handling for validation and HTTP errors
- API router integration under /api/v1

Usage:
    Direct: python -m catalog_search.main
    Server: uvicorn catalog_search.main:app --host 0.0.0.0 --port 8000
"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .api.v1 import api_router
from .config import settings
from .core.shared.database_service import database_service
from .models import ErrorResponse

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("catalog_search")

# ============================================================================
# APPLICATION INITIALIZATION
# ============================================================================

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=(
        "Catalog Search - faceted advanced search over datasets and flow/job pairs "
        "with ranked results and exact total counts."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# ============================================================================
# MIDDLEWARE CONFIGURATION
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# ============================================================================
# APPLICATION EVENT HANDLERS
# ============================================================================


@app.on_event("startup")
async def startup_event() -> None:
    """
    Application startup event handler.

    Development databases (SQLite) get the catalog tables created so the
    service can start against an empty file; MySQL and PostgreSQL catalogs
    are provisioned elsewhere and are left untouched.
    """
    logger.info(f"Starting {settings.api_title} v{settings.api_version} (debug={settings.debug})")

    if database_service.dialect_name == "sqlite":
        await database_service.init_db()

    logger.info("Startup complete")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Close pooled database connections."""
    logger.info(f"Shutting down {settings.api_title}...")
    await database_service.close()


# ============================================================================
# ERROR HANDLERS
# ============================================================================


@app.exception_handler(RequestValidationError)
@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return request and model validation errors as a 422 ``ErrorResponse``."""
    error_response = ErrorResponse(error="Validation Error", detail=str(exc), timestamp=datetime.now())
    return JSONResponse(status_code=422, content=error_response.model_dump(mode="json"))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    error_response = ErrorResponse(
        error=f"HTTP {exc.status_code}",
        detail=str(exc.detail),
        timestamp=datetime.now(),
    )
    return JSONResponse(status_code=exc.status_code, content=error_response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected errors.

    The detail is only exposed in debug mode.
    """
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    error_response = ErrorResponse(
        error="Internal Server Error",
        detail=str(exc) if settings.debug else "An unexpected error occurred",
        timestamp=datetime.now(),
    )
    return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))


# ============================================================================
# ROUTER CONFIGURATION
# ============================================================================

app.include_router(api_router, prefix="/api/v1")


@app.get("/", tags=["root"])
async def root() -> Dict[str, Any]:
    """API information."""
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "status": "running",
        "docs_url": "/docs",
        "health_check": "/api/v1/health",
        "timestamp": datetime.now(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog_search.main:app", host="0.0.0.0", port=8000, reload=settings.debug, log_level="info")
