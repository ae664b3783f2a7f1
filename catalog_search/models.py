# catalog_search/models.py
"""
Pydantic models for the Catalog Search API.

Request bodies are the loosely-typed filter structures the search service
normalizes itself; the models here describe the responses. Field names
follow the camelCase wire format through aliases.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DatasetItem(BaseModel):
    """One dataset in a search result page."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    source: Optional[str] = None
    urn: Optional[str] = None
    dataset_schema: Optional[str] = Field(default=None, alias="schema")


class FlowJobItem(BaseModel):
    """One flow, or flow + job, in a search result page."""

    model_config = ConfigDict(populate_by_name=True)

    app_code: str = Field(alias="appCode")
    flow_id: int = Field(alias="flowId")
    flow_name: Optional[str] = Field(default=None, alias="flowName")
    flow_path: Optional[str] = Field(default=None, alias="flowPath")
    flow_group: Optional[str] = Field(default=None, alias="flowGroup")
    job_id: Optional[int] = Field(default=None, alias="jobId")
    job_name: Optional[str] = Field(default=None, alias="jobName")
    job_path: Optional[str] = Field(default=None, alias="jobPath")
    job_type: Optional[str] = Field(default=None, alias="jobType")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    path: str
    link: str


class SearchPage(BaseModel):
    """Envelope fields shared by every search result page."""

    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(ge=0, description="Rows matching the filter, ignoring paging")
    page: int = Field(ge=1, description="1-based page number")
    items_per_page: int = Field(gt=0, alias="itemsPerPage")
    total_pages: int = Field(ge=0, alias="totalPages")


class DatasetSearchResponse(SearchPage):
    data: List[DatasetItem] = Field(default_factory=list)


class FlowJobSearchResponse(SearchPage):
    data: List[FlowJobItem] = Field(default_factory=list)
    is_flow_job: bool = Field(default=True, alias="isFlowJob")


class HealthStatus(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime = Field(default_factory=datetime.now)
    version: str
    database: Dict[str, Any]


class ErrorResponse(BaseModel):
    """
    Standard error response model for API errors.

    Example:
        error = ErrorResponse(
            error="HTTP 504",
            detail="Dataset search timed out after 30.0s",
        )
    """

    error: str = Field(description="Error category or type")
    detail: Optional[str] = Field(default=None, description="Detailed error message")
    timestamp: datetime = Field(default_factory=datetime.now, description="Timestamp when error occurred")
    request_id: Optional[str] = Field(default=None, description="Unique identifier for the request")
