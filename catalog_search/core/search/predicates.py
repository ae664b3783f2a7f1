# catalog_search/core/search/predicates.py
"""
Immutable predicate tree for advanced search queries.

Facets are turned into small frozen nodes (``Like``, ``NotLike``, ``InList``,
``Membership``, ...) which render to SQL text against a ``RenderContext``.
Rendering never places a caller value in the SQL text: every value goes
through ``ParamBag.bind`` and appears as a named placeholder. Placeholder
names are derived from a facet prefix plus a per-prefix counter, so rendering
the same tree twice gives byte-identical SQL and parameters.

``WhereClause`` composes any number of optional facet groups and carries the
"needs a leading AND" flag, so exactly one ``WHERE`` is emitted and every
following group is joined with ``AND`` regardless of which groups are
present.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from .filter_spec import FacetValues

# Escape character for LIKE patterns; the same literal works in MySQL,
# PostgreSQL and SQLite.
LIKE_ESCAPE = "!"

SUBSTRING = "substring"
PREFIX = "prefix"
SUFFIX = "suffix"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so *value* matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def like_pattern(value: str, mode: str = SUBSTRING) -> str:
    escaped = escape_like(value)
    if mode == PREFIX:
        return f"{escaped}%"
    if mode == SUFFIX:
        return f"%{escaped}"
    return f"%{escaped}%"


class ParamBag:
    """Allocates deterministic placeholder names and collects bound values."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._counters: Dict[str, int] = {}

    def bind(self, prefix: str, value: Any) -> str:
        index = self._counters.get(prefix, 0)
        self._counters[prefix] = index + 1
        name = f"{prefix}_{index}"
        self._values[name] = value
        return f":{name}"

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)


@dataclass
class RenderContext:
    """Dialect name plus the parameter bag shared by one compiled statement."""

    dialect: str
    params: ParamBag = field(default_factory=ParamBag)

    def quote(self, identifier: str) -> str:
        if self.dialect == "mysql":
            return f"`{identifier}`"
        return f'"{identifier}"'


# =============================================================================
# Predicate nodes
# =============================================================================


class Predicate(Protocol):
    def render(self, ctx: RenderContext) -> str: ...


def _join(parts: Sequence[str], operator: str) -> str:
    if len(parts) == 1:
        return parts[0]
    return "(" + f" {operator} ".join(parts) + ")"


@dataclass(frozen=True)
class MatchNothing:
    def render(self, ctx: RenderContext) -> str:
        return "1 = 0"


@dataclass(frozen=True)
class Like:
    """``column LIKE pattern`` for each value, OR-ed together."""

    column: str
    values: Tuple[str, ...]
    prefix: str
    mode: str = SUBSTRING

    def render(self, ctx: RenderContext) -> str:
        parts = [
            f"{self.column} LIKE {ctx.params.bind(self.prefix, like_pattern(v, self.mode))} ESCAPE '{LIKE_ESCAPE}'"
            for v in self.values
        ]
        return _join(parts, "OR")


@dataclass(frozen=True)
class NotLike:
    """``column NOT LIKE '%value%'`` for each value, AND-ed together."""

    column: str
    values: Tuple[str, ...]
    prefix: str

    def render(self, ctx: RenderContext) -> str:
        parts = [
            f"{self.column} NOT LIKE {ctx.params.bind(self.prefix, like_pattern(v))} ESCAPE '{LIKE_ESCAPE}'"
            for v in self.values
        ]
        return _join(parts, "AND")


@dataclass(frozen=True)
class InList:
    """``column IN (...)`` / ``column NOT IN (...)`` over bound values.

    An empty list renders a well-formed constant: IN matches nothing,
    NOT IN matches everything.
    """

    column: str
    values: Tuple[Any, ...]
    prefix: str
    negate: bool = False

    def render(self, ctx: RenderContext) -> str:
        if not self.values:
            return "1 = 1" if self.negate else MatchNothing().render(ctx)
        placeholders = ", ".join(ctx.params.bind(self.prefix, v) for v in self.values)
        operator = "NOT IN" if self.negate else "IN"
        return f"{self.column} {operator} ({placeholders})"


@dataclass(frozen=True)
class IdLiteralList:
    """``column IN (1, 2, ...)`` with integer ids written into the SQL text.

    Only for ids read back from the catalog itself, never caller input. Each
    value is coerced with ``int()`` so nothing but digits reaches the text.
    The list takes no bind parameters, so its length is not bounded by the
    driver's placeholder limit.
    """

    column: str
    ids: Tuple[int, ...]

    def render(self, ctx: RenderContext) -> str:
        if not self.ids:
            return MatchNothing().render(ctx)
        literals = ", ".join(str(int(i)) for i in self.ids)
        return f"{self.column} IN ({literals})"


@dataclass(frozen=True)
class AllOf:
    parts: Tuple[Predicate, ...]

    def render(self, ctx: RenderContext) -> str:
        return _join([p.render(ctx) for p in self.parts], "AND")


@dataclass(frozen=True)
class SubSelect:
    """A nested ``SELECT`` used as an id source for membership tests."""

    columns: str
    source: str
    where: Optional[Predicate] = None
    group_by: str = ""
    having: Optional[Predicate] = None

    def render(self, ctx: RenderContext) -> str:
        sql = f"SELECT {self.columns} FROM {self.source}"
        if self.where is not None:
            sql += f" WHERE {self.where.render(ctx)}"
        if self.group_by:
            sql += f" GROUP BY {self.group_by}"
        if self.having is not None:
            sql += f" HAVING {self.having.render(ctx)}"
        return sql


@dataclass(frozen=True)
class UnionSelect:
    """Set union of id-returning selects (duplicates removed)."""

    selects: Tuple[SubSelect, ...]

    def render(self, ctx: RenderContext) -> str:
        return " UNION ".join(s.render(ctx) for s in self.selects)


@dataclass(frozen=True)
class Membership:
    """``column IN (subquery)`` / ``column NOT IN (subquery)``."""

    column: str
    source: Predicate
    negate: bool = False

    def render(self, ctx: RenderContext) -> str:
        operator = "NOT IN" if self.negate else "IN"
        return f"{self.column} {operator} ({self.source.render(ctx)})"


# =============================================================================
# Facet -> predicate
# =============================================================================


def facet_predicate(column: str, facet: FacetValues, prefix: str, exact: bool = False) -> Optional[Predicate]:
    """
    Build the predicate for one include/exclude facet.

    Exact facets use ``IN`` / ``NOT IN``; substring facets use OR-ed ``LIKE``
    for includes and AND-ed ``NOT LIKE`` for excludes. When both lists are
    present the two sides are AND-ed, each rendered as its own group.
    """
    parts = []
    if facet.include:
        if exact:
            parts.append(InList(column, facet.include, f"{prefix}_in"))
        else:
            parts.append(Like(column, facet.include, f"{prefix}_in"))
    if facet.exclude:
        if exact:
            parts.append(InList(column, facet.exclude, f"{prefix}_not", negate=True))
        else:
            parts.append(NotLike(column, facet.exclude, f"{prefix}_not"))
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return AllOf(tuple(parts))


# =============================================================================
# WHERE composition
# =============================================================================


@dataclass(frozen=True)
class Fragment:
    """Rendered predicate text and whether it must be preceded by ``AND``."""

    text: str
    requires_conjunction_before: bool


@dataclass(frozen=True)
class WhereClause:
    """Ordered optional predicate groups; absent groups are ``None``."""

    groups: Tuple[Optional[Predicate], ...] = ()

    def with_group(self, predicate: Optional[Predicate]) -> "WhereClause":
        return WhereClause(self.groups + (predicate,))

    def fragments(self, ctx: RenderContext) -> Tuple[Fragment, ...]:
        needs_conjunction = False
        out = []
        for group in self.groups:
            if group is None:
                continue
            out.append(Fragment(group.render(ctx), needs_conjunction))
            needs_conjunction = True
        return tuple(out)

    def render(self, ctx: RenderContext) -> str:
        """Render as ``WHERE a AND b ...``, or an empty string with no groups."""
        sql = []
        for fragment in self.fragments(ctx):
            sql.append(("AND " if fragment.requires_conjunction_before else "WHERE ") + fragment.text)
        return " ".join(sql)
