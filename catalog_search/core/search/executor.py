# catalog_search/core/search/executor.py
"""
Paged execution of compiled search queries.

The primary statement and the count statement run back to back on the
connection the session has pinned for its transaction, so both observe the
same snapshot and no other statement can run between them on that
connection.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Tuple

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from .compiler import CompiledQuery, IdQuery
from .filter_spec import PageWindow
from .results import DatasetResult, FlowJobResult, ResultPage, SearchRecord

logger = logging.getLogger("catalog_search.search")

RowMapper = Callable[[Any], SearchRecord]


class PagedExecutor:
    """Runs primary + count statements and assembles a ``ResultPage``."""

    def __init__(self, row_mapper: RowMapper, is_flow_job: bool = False):
        self.row_mapper = row_mapper
        self.is_flow_job = is_flow_job

    async def execute(self, session: AsyncSession, compiled: CompiledQuery, window: PageWindow) -> ResultPage:
        connection = await session.connection()

        started = time.perf_counter()
        logger.debug(f"Search SQL: {compiled.sql}")
        result = await connection.execute(text(compiled.sql), compiled.params)
        rows = result.fetchall()

        logger.debug(f"Count SQL ({compiled.count_mode.value}): {compiled.count_sql}")
        count_result = await connection.execute(text(compiled.count_sql), compiled.count_params)
        count_row = count_result.first()

        if count_row is None or count_row[0] is None:
            logger.warning("Count statement returned no row; reporting count 0")
            count = 0
        else:
            count = int(count_row[0])

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Search returned {len(rows)} rows of {count} in {elapsed_ms:.1f}ms")

        data: List[SearchRecord] = [self.row_mapper(row) for row in rows]
        return ResultPage(
            count=count,
            page=window.page,
            items_per_page=window.size,
            data=data,
            is_flow_job=self.is_flow_job,
        )

    @staticmethod
    async def fetch_ids(session: AsyncSession, query: IdQuery) -> Tuple[Any, ...]:
        """Run an id-only statement on the session's pinned connection."""
        connection = await session.connection()
        logger.debug(f"Candidate SQL: {query.sql}")
        result = await connection.execute(text(query.sql), query.params)
        ids = tuple(row[0] for row in result.fetchall())
        logger.debug(f"Candidate stage matched {len(ids)} ids")
        return ids


def dataset_executor() -> PagedExecutor:
    return PagedExecutor(DatasetResult.from_row)


def flow_job_executor(with_job: bool) -> PagedExecutor:
    return PagedExecutor(lambda row: FlowJobResult.from_row(row, with_job=with_job), is_flow_job=True)
