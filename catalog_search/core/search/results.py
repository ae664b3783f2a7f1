# catalog_search/core/search/results.py
"""Result records and the paged result envelope."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .filter_spec import PageWindow


@dataclass
class DatasetResult:
    """One dataset row of a search result."""

    id: int
    name: str
    source: Optional[str] = None
    urn: Optional[str] = None
    schema: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "DatasetResult":
        m = row._mapping
        return cls(
            id=m["id"],
            name=m["name"],
            source=m["source"],
            urn=m["urn"],
            schema=m["dataset_schema"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "urn": self.urn,
            "schema": self.schema,
        }


@dataclass
class FlowJobResult:
    """One flow (or flow + job) row of a search result."""

    app_code: str
    flow_id: int
    flow_name: Optional[str] = None
    flow_path: Optional[str] = None
    flow_group: Optional[str] = None
    job_id: Optional[int] = None
    job_name: Optional[str] = None
    job_path: Optional[str] = None
    job_type: Optional[str] = None
    use_job_path: bool = False

    @property
    def display_name(self) -> Optional[str]:
        if self.job_name and self.job_name.strip():
            return self.job_name
        return self.flow_name

    @property
    def path(self) -> str:
        if self.use_job_path and self.job_path:
            return f"{self.app_code}/{self.job_path}"
        return f"{self.app_code}/{self.flow_path}"

    @property
    def link(self) -> str:
        return f"#/flows/{self.app_code}/{self.flow_group}/{self.flow_id}/page/1"

    @classmethod
    def from_row(cls, row: Any, with_job: bool = False) -> "FlowJobResult":
        m = row._mapping
        result = cls(
            app_code=m["app_code"],
            flow_id=m["flow_id"],
            flow_name=m["flow_name"],
            flow_path=m["flow_path"],
            flow_group=m["flow_group"],
        )
        if with_job:
            result.job_id = m["job_id"]
            result.job_name = m["job_name"]
            result.job_path = m["job_path"]
            result.job_type = m["job_type"]
            result.use_job_path = True
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appCode": self.app_code,
            "flowId": self.flow_id,
            "flowName": self.flow_name,
            "flowPath": self.flow_path,
            "flowGroup": self.flow_group,
            "jobId": self.job_id,
            "jobName": self.job_name,
            "jobPath": self.job_path,
            "jobType": self.job_type,
            "displayName": self.display_name,
            "path": self.path,
            "link": self.link,
        }


SearchRecord = Union[DatasetResult, FlowJobResult]


@dataclass
class ResultPage:
    """
    Paged result envelope.

    ``count`` is the number of rows matching the filter with no window
    applied; ``data`` is the requested window of those rows, in ranked order.
    """

    count: int
    page: int
    items_per_page: int
    data: List[SearchRecord] = field(default_factory=list)
    is_flow_job: bool = False

    @property
    def total_pages(self) -> int:
        if self.count <= 0:
            return 0
        return math.ceil(self.count / self.items_per_page)

    @classmethod
    def empty(cls, window: PageWindow, is_flow_job: bool = False) -> "ResultPage":
        return cls(count=0, page=window.page, items_per_page=window.size, is_flow_job=is_flow_job)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "count": self.count,
            "page": self.page,
            "itemsPerPage": self.items_per_page,
            "totalPages": self.total_pages,
            "data": [record.to_dict() for record in self.data],
        }
        if self.is_flow_job:
            out["isFlowJob"] = True
        return out
