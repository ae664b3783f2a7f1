# catalog_search/core/search/compiler.py
"""
Query compilation for advanced search.

A compiler turns a normalized filter spec and a page window into a
``CompiledQuery``: the primary statement (select, base relation, WHERE,
ORDER BY, window), its bound parameters, and the matching count statement
over the same base relation and WHERE with no ordering or window.

Compilers are pure. They hold only the dialect and their collaborators, do
no I/O, and compiling the same input twice yields identical SQL and
parameters.

Dataset search takes one of three shapes:

* structured: facet predicates only (``CountMode.FILTERED``)
* full-text only: membership in the comment full-text union
  (``CountMode.UNION``)
* structured + full text: stage one (``compile_candidates``) returns the ids
  matching the structured facets, stage two (``compile`` with
  ``candidate_ids``) intersects those ids with the full-text union and is
  paginated and counted (``CountMode.UNION``)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from .field_conjunction import FieldConjunctionResolver
from .filter_spec import DatasetFilterSpec, FlowJobFilterSpec, PageWindow, Values
from .full_text import CommentFullTextStage
from .predicates import (
    InList,
    Like,
    Membership,
    Predicate,
    RenderContext,
    SubSelect,
    WhereClause,
    facet_predicate,
)
from .ranking import RankingPolicy

LIMIT_PARAM = "page_limit"
OFFSET_PARAM = "page_offset"


class CountMode(str, Enum):
    """Which row set the count statement measures."""

    FILTERED = "filtered"
    UNION = "union"


@dataclass(frozen=True)
class CompiledQuery:
    """Primary statement, count statement and their bound parameters."""

    sections: Tuple[Tuple[str, str], ...]
    params: Dict[str, Any]
    count_sql: str
    count_params: Dict[str, Any]
    count_mode: CountMode = CountMode.FILTERED

    @property
    def sql(self) -> str:
        return " ".join(text for _, text in self.sections if text)

    def section(self, name: str) -> str:
        for section_name, text in self.sections:
            if section_name == name:
                return text
        return ""


@dataclass(frozen=True)
class IdQuery:
    """An unpaginated statement returning one id column."""

    sql: str
    params: Dict[str, Any]


def _window_clause(window: PageWindow, params: Dict[str, Any]) -> str:
    params[LIMIT_PARAM] = window.size
    params[OFFSET_PARAM] = window.offset
    return f"LIMIT :{LIMIT_PARAM} OFFSET :{OFFSET_PARAM}"


def _count_statement(columns: str, base: str, where: str) -> str:
    inner = " ".join(part for part in (f"SELECT {columns}", base, where) if part)
    return f"SELECT COUNT(*) FROM ({inner}) AS matched"


# =============================================================================
# Datasets
# =============================================================================


class DatasetQueryCompiler:
    """Compiles dataset filter specs for one SQL dialect."""

    BASE = "FROM dict_dataset d"
    ID_COLUMN = "d.id"

    def __init__(
        self,
        dialect: str,
        ranking: Optional[RankingPolicy] = None,
        field_resolver: Optional[FieldConjunctionResolver] = None,
        full_text: Optional[CommentFullTextStage] = None,
    ):
        self.dialect = dialect
        self.ranking = ranking or RankingPolicy()
        self.field_resolver = field_resolver or FieldConjunctionResolver()
        self.full_text = full_text or CommentFullTextStage()

    def _select(self, ctx: RenderContext) -> str:
        return f"SELECT d.id, d.name, d.source, d.urn, d.{ctx.quote('schema')} AS dataset_schema"

    def _field_membership(self, terms: Values, prefix: str, negate: bool = False) -> Optional[Predicate]:
        if not terms:
            return None
        alias = "fn" if negate else "fd"
        source = SubSelect(
            columns=f"{alias}.dataset_id",
            source=f"dict_field_detail {alias}",
            where=Like(f"{alias}.field_name", terms, prefix),
        )
        return Membership(self.ID_COLUMN, source, negate=negate)

    def structured_where(self, spec: DatasetFilterSpec) -> WhereClause:
        """WHERE groups for every structured facet; absent facets are skipped."""
        return (
            WhereClause()
            .with_group(self._field_membership(spec.fields.any, "fields_any"))
            .with_group(self.field_resolver.predicate(self.ID_COLUMN, spec.fields.all))
            .with_group(self._field_membership(spec.fields.exclude, "fields_not", negate=True))
            .with_group(facet_predicate("d.parent_name", spec.scope, "scope", exact=True))
            .with_group(facet_predicate("d.name", spec.table, "table"))
            .with_group(InList("d.source", spec.sources, "sources") if spec.sources else None)
        )

    def uses_full_text(self, spec: DatasetFilterSpec) -> bool:
        return spec.has_full_text and self.full_text.has_terms(spec.comments)

    def needs_candidate_stage(self, spec: DatasetFilterSpec) -> bool:
        return self.uses_full_text(spec) and spec.has_structured_facets

    def compile_candidates(self, spec: DatasetFilterSpec) -> IdQuery:
        """Stage one of structured + full-text search: every structured match id."""
        ctx = RenderContext(self.dialect)
        where = self.structured_where(spec).render(ctx)
        sql = " ".join(part for part in (f"SELECT {self.ID_COLUMN}", self.BASE, where) if part)
        return IdQuery(sql=sql, params=ctx.params.values)

    def compile(
        self,
        spec: DatasetFilterSpec,
        window: PageWindow,
        candidate_ids: Optional[Sequence[int]] = None,
    ) -> CompiledQuery:
        if self.uses_full_text(spec):
            if spec.has_structured_facets and candidate_ids is None:
                raise ValueError("candidate ids are required when full text is combined with structured facets")
            ids = tuple(candidate_ids) if candidate_ids is not None else None
            where = WhereClause((self.full_text.predicate(self.ID_COLUMN, spec.comments, ids),))
            mode = CountMode.UNION
        else:
            where = self.structured_where(spec)
            mode = CountMode.FILTERED

        ctx = RenderContext(self.dialect)
        select = self._select(ctx)
        where_sql = where.render(ctx)
        count_params = ctx.params.values
        order_by = self.ranking.order_by(ctx, spec.table.include)
        params = ctx.params.values
        limit = _window_clause(window, params)

        return CompiledQuery(
            sections=(
                ("select", select),
                ("from", self.BASE),
                ("where", where_sql),
                ("order_by", order_by),
                ("limit", limit),
            ),
            params=params,
            count_sql=_count_statement(self.ID_COLUMN, self.BASE, where_sql),
            count_params=count_params,
            count_mode=mode,
        )


# =============================================================================
# Flows and jobs
# =============================================================================


class FlowJobQueryCompiler:
    """Compiles flow/job filter specs; the job relation joins in only for job facets."""

    FLOW_SELECT = "SELECT a.app_code, f.flow_id, f.flow_name, f.flow_path, f.flow_group"
    FLOW_BASE = "FROM flow f JOIN cfg_application a ON f.app_id = a.app_id"
    FLOW_ORDER = "ORDER BY a.app_code, f.flow_name, f.flow_id"

    JOB_SELECT = FLOW_SELECT + ", j.job_id, j.job_name, j.job_path, j.job_type"
    JOB_BASE = (
        "FROM flow_job j "
        "JOIN flow f ON j.app_id = f.app_id AND j.flow_id = f.flow_id "
        "JOIN cfg_application a ON j.app_id = a.app_id"
    )
    JOB_ORDER = FLOW_ORDER + ", j.job_id"

    def __init__(self, dialect: str):
        self.dialect = dialect

    def where(self, spec: FlowJobFilterSpec) -> WhereClause:
        return (
            WhereClause()
            .with_group(facet_predicate("a.app_code", spec.appcode, "appcode", exact=True))
            .with_group(facet_predicate("f.flow_name", spec.flow, "flow"))
            .with_group(facet_predicate("j.job_name", spec.job, "job") if spec.uses_job_relation else None)
        )

    def compile(self, spec: FlowJobFilterSpec, window: PageWindow) -> CompiledQuery:
        if spec.uses_job_relation:
            select, base, order_by = self.JOB_SELECT, self.JOB_BASE, self.JOB_ORDER
        else:
            select, base, order_by = self.FLOW_SELECT, self.FLOW_BASE, self.FLOW_ORDER

        ctx = RenderContext(self.dialect)
        where_sql = self.where(spec).render(ctx)
        count_params = ctx.params.values
        params = ctx.params.values
        limit = _window_clause(window, params)

        return CompiledQuery(
            sections=(
                ("select", select),
                ("from", base),
                ("where", where_sql),
                ("order_by", order_by),
                ("limit", limit),
            ),
            params=params,
            count_sql=_count_statement("f.flow_id", base, where_sql),
            count_params=count_params,
        )
