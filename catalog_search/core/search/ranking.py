# catalog_search/core/search/ranking.py
"""
Result ordering for dataset search.

Ordering is a chain of sort keys:

1. Name match tier, only when the ``table`` facet has include terms: an exact
   name match ranks first, then a name starting with a term, then a name
   ending with a term, then any other containment, and everything else last.
2. URN namespace tier: datasets from well-known storage namespaces come before
   datasets from anywhere else.
3. ``urn`` then ``id`` so rows that tie on every tier still come back in one
   fixed order, which keeps page boundaries stable between calls.

Tiers are declared as data and rendered to ``CASE`` expressions; all terms
and namespace prefixes are bound as parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .predicates import PREFIX, SUBSTRING, SUFFIX, InList, Like, Predicate, RenderContext

EXACT = "exact"


@dataclass(frozen=True)
class NameTier:
    rank: int
    mode: str


NAME_TIERS: Tuple[NameTier, ...] = (
    NameTier(0, EXACT),
    NameTier(2, PREFIX),
    NameTier(3, SUFFIX),
    NameTier(4, SUBSTRING),
)
NAME_FALLBACK_RANK = 9

# (literal URN prefix, rank); lower rank sorts first. The order is the
# documented namespace priority, which puts warehouse DWH_ ahead of tracking.
URN_NAMESPACE_TIERS: Tuple[Tuple[str, int], ...] = (
    ("teradata://DWH_", 1),
    ("hdfs://data/tracking/", 2),
    ("teradata://DWH/", 3),
    ("hdfs://data/databases/", 4),
    ("hdfs://data/derived/", 5),
)
UNRANKED_NAMESPACE = 99


def _case(branches: List[Tuple[str, int]], fallback: int) -> str:
    whens = " ".join(f"WHEN {condition} THEN {rank}" for condition, rank in branches)
    return f"CASE {whens} ELSE {fallback} END"


class RankingPolicy:
    """Renders the ``ORDER BY`` clause for dataset queries."""

    def __init__(
        self,
        name_column: str = "d.name",
        urn_column: str = "d.urn",
        id_column: str = "d.id",
        namespaces: Tuple[Tuple[str, int], ...] = URN_NAMESPACE_TIERS,
    ):
        self.name_column = name_column
        self.urn_column = urn_column
        self.id_column = id_column
        self.namespaces = namespaces

    def _name_condition(self, tier: NameTier, terms: Tuple[str, ...]) -> Predicate:
        if tier.mode == EXACT:
            return InList(self.name_column, terms, "rank_exact")
        return Like(self.name_column, terms, f"rank_{tier.mode}", tier.mode)

    def name_tier(self, terms: Tuple[str, ...], ctx: RenderContext) -> str:
        branches = [(self._name_condition(t, terms).render(ctx), t.rank) for t in NAME_TIERS]
        return _case(branches, NAME_FALLBACK_RANK)

    def namespace_tier(self, ctx: RenderContext) -> str:
        branches = [
            (Like(self.urn_column, (prefix,), "rank_urn", PREFIX).render(ctx), rank)
            for prefix, rank in self.namespaces
        ]
        return _case(branches, UNRANKED_NAMESPACE)

    def order_by(self, ctx: RenderContext, name_terms: Optional[Tuple[str, ...]] = None) -> str:
        keys = []
        if name_terms:
            keys.append(self.name_tier(name_terms, ctx))
        keys.append(self.namespace_tier(ctx))
        keys.append(self.urn_column)
        keys.append(self.id_column)
        return "ORDER BY " + ", ".join(keys)
