# catalog_search/core/search/adv_search_service.py
"""
Advanced search service for the metadata catalog.

Entry points for faceted dataset search and flow/job search. Each call:

    Parse -> Compile -> Execute(primary) -> Execute(count) -> Assemble

runs inside exactly one session scope from ``DatabaseService.get_session``
(one pooled connection, one transaction) and under the configured search
timeout. Statement failures roll the transaction back and surface as
``SearchExecutionError``; timeouts surface as ``SearchTimeoutError``.

Usage:
    from catalog_search.core.search import adv_search_service

    page = await adv_search_service.search_datasets(
        {"table": {"in": "PageView"}, "comments": "deprecated"},
        page=1,
        size=20,
    )
    payload = page.to_dict()
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional

from sqlalchemy.exc import SQLAlchemyError

from catalog_search.config import settings
from catalog_search.core.shared.database_service import DatabaseService, database_service

from .compiler import DatasetQueryCompiler, FlowJobQueryCompiler
from .errors import SearchExecutionError, SearchTimeoutError
from .executor import PagedExecutor, dataset_executor, flow_job_executor
from .filter_spec import (
    DatasetFilterSpec,
    FlowJobFilterSpec,
    PageWindow,
    parse_dataset_spec,
    parse_flow_job_spec,
)
from .results import ResultPage

logger = logging.getLogger("catalog_search.search")


class AdvSearchService:
    """
    Stateless orchestration of advanced search calls.

    Holds only the database service it takes sessions from and the paging
    limits; every call builds its own compiler and owns its own session.
    """

    def __init__(
        self,
        database: Optional[DatabaseService] = None,
        timeout_seconds: Optional[float] = None,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ):
        self._database = database
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.search_timeout_seconds
        self.default_page_size = default_page_size or settings.search_default_page_size
        self.max_page_size = max_page_size or settings.search_max_page_size

    @property
    def database(self) -> DatabaseService:
        return self._database or database_service

    def window(self, page: Any, size: Any) -> PageWindow:
        return PageWindow.normalize(page, size, self.default_page_size, self.max_page_size)

    async def _run(self, label: str, call: Awaitable[ResultPage]) -> ResultPage:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error(f"{label} search timed out after {self.timeout_seconds}s")
            raise SearchTimeoutError(f"{label} search timed out after {self.timeout_seconds}s") from e
        except SQLAlchemyError as e:
            logger.error(f"{label} search failed: {e}")
            raise SearchExecutionError(f"{label} search failed: {e}") from e

    # =========================================================================
    # Datasets
    # =========================================================================

    async def search_datasets(self, filters: Any, page: Any = 1, size: Any = None) -> ResultPage:
        """
        Faceted dataset search.

        Args:
            filters: Dataset filter structure (scope, table, fields, sources, comments)
            page: 1-based page number
            size: Page length; defaults and caps come from settings

        Returns:
            ResultPage of DatasetResult records. A *filters* value that is not
            a mapping yields an empty page.
        """
        window = self.window(page, size)
        spec = parse_dataset_spec(filters)
        if spec is None:
            logger.debug("Dataset search without a filter mapping; returning empty page")
            return ResultPage.empty(window)

        return await self._run("Dataset", self._search_datasets(spec, window))

    async def _search_datasets(self, spec: DatasetFilterSpec, window: PageWindow) -> ResultPage:
        compiler = DatasetQueryCompiler(self.database.dialect_name)
        executor = dataset_executor()

        async with self.database.get_session() as session:
            if compiler.needs_candidate_stage(spec):
                candidates = await PagedExecutor.fetch_ids(session, compiler.compile_candidates(spec))
                if not candidates:
                    return ResultPage.empty(window)
                compiled = compiler.compile(spec, window, candidate_ids=candidates)
            else:
                compiled = compiler.compile(spec, window)

            return await executor.execute(session, compiled, window)

    # =========================================================================
    # Flows and jobs
    # =========================================================================

    async def search_flow_jobs(self, filters: Any, page: Any = 1, size: Any = None) -> ResultPage:
        """
        Faceted flow/job search (appcode, flow, job facets).

        The job relation is joined in only when a job facet is present; its
        rows then carry the job name and path.
        """
        window = self.window(page, size)
        spec = parse_flow_job_spec(filters)
        if spec is None:
            logger.debug("Flow search without a filter mapping; returning empty page")
            return ResultPage.empty(window, is_flow_job=True)

        return await self._run("Flow", self._search_flow_jobs(spec, window))

    async def _search_flow_jobs(self, spec: FlowJobFilterSpec, window: PageWindow) -> ResultPage:
        compiler = FlowJobQueryCompiler(self.database.dialect_name)
        executor = flow_job_executor(with_job=spec.uses_job_relation)

        async with self.database.get_session() as session:
            compiled = compiler.compile(spec, window)
            return await executor.execute(session, compiled, window)


# Global service instance
adv_search_service = AdvSearchService()


def get_adv_search_service() -> AdvSearchService:
    """Get the global advanced search service instance."""
    return adv_search_service
