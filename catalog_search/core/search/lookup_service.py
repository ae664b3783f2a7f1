# catalog_search/core/search/lookup_service.py
"""
Distinct-value lookups that feed the advanced search form.

Each lookup returns a flat list of strings: dataset sources (most frequent
first), scopes, table names, field names, application codes, flow names and
job names. Optional restrictions arrive as comma-separated strings and are
bound as parameters.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from .filter_spec import Values, split_values
from .predicates import InList, Like, RenderContext

logger = logging.getLogger("catalog_search.search")


class LookupService:
    """Enumerates facet values from the catalog relations."""

    async def _strings(self, session: AsyncSession, sql: str, params: Optional[Dict[str, Any]] = None) -> List[str]:
        result = await session.execute(text(sql), params or {})
        return [row[0] for row in result.fetchall() if row[0] is not None]

    @staticmethod
    def _dialect(session: AsyncSession) -> str:
        return session.get_bind().dialect.name

    async def get_dataset_sources(self, session: AsyncSession) -> List[str]:
        return await self._strings(
            session,
            "SELECT source FROM dict_dataset WHERE source IS NOT NULL "
            "GROUP BY source ORDER BY COUNT(*) DESC, source",
        )

    async def get_dataset_scopes(self, session: AsyncSession) -> List[str]:
        return await self._strings(
            session,
            "SELECT DISTINCT parent_name FROM dict_dataset WHERE parent_name IS NOT NULL ORDER BY parent_name",
        )

    async def get_table_names(self, session: AsyncSession, scopes: Optional[str] = None) -> List[str]:
        """Dataset names, optionally only those under the given comma-separated scopes."""
        ctx = RenderContext(self._dialect(session))
        where = ""
        values = split_values(scopes)
        if values:
            where = f"WHERE {InList('parent_name', values, 'scope').render(ctx)} "
        return await self._strings(
            session,
            f"SELECT DISTINCT name FROM dict_dataset {where}ORDER BY name",
            ctx.params.values,
        )

    def _table_match(self, tables: Values, ctx: RenderContext) -> str:
        if ctx.dialect in ("mysql", "postgresql"):
            pattern = "|".join(re.escape(t) for t in tables)
            operator = "REGEXP" if ctx.dialect == "mysql" else "~"
            return f"d.name {operator} {ctx.params.bind('tables', pattern)}"
        return Like("d.name", tables, "tables").render(ctx)

    async def get_field_names(self, session: AsyncSession, tables: Optional[str] = None) -> List[str]:
        """Field names, optionally only for datasets whose name matches any given table."""
        ctx = RenderContext(self._dialect(session))
        values = split_values(tables)
        if values:
            sql = (
                "SELECT DISTINCT f.field_name FROM dict_field_detail f "
                "JOIN dict_dataset d ON f.dataset_id = d.id "
                f"WHERE {self._table_match(values, ctx)} ORDER BY f.field_name"
            )
        else:
            sql = "SELECT DISTINCT field_name FROM dict_field_detail ORDER BY field_name"
        return await self._strings(session, sql, ctx.params.values)

    async def get_flow_app_codes(self, session: AsyncSession) -> List[str]:
        return await self._strings(session, "SELECT DISTINCT app_code FROM cfg_application ORDER BY app_code")

    async def get_flow_names(self, session: AsyncSession, apps: Optional[str] = None) -> List[str]:
        """Flow names, optionally only for the given comma-separated application codes."""
        ctx = RenderContext(self._dialect(session))
        values = split_values(apps)
        if values:
            sql = (
                "SELECT DISTINCT f.flow_name FROM flow f "
                "JOIN cfg_application a ON f.app_id = a.app_id "
                f"WHERE {InList('a.app_code', values, 'apps').render(ctx)} ORDER BY f.flow_name"
            )
        else:
            sql = "SELECT DISTINCT flow_name FROM flow ORDER BY flow_name"
        return await self._strings(session, sql, ctx.params.values)

    async def get_job_names(self, session: AsyncSession) -> List[str]:
        return await self._strings(session, "SELECT DISTINCT job_name FROM flow_job ORDER BY job_name")


lookup_service = LookupService()


def get_lookup_service() -> LookupService:
    """Get the global lookup service instance."""
    return lookup_service
