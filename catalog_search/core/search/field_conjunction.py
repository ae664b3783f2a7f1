# catalog_search/core/search/field_conjunction.py
"""
"All of these fields" resolution for dataset search.

``fields.all = [a, b, c]`` keeps only datasets that have, for every term, at
least one field whose name contains that term. Rather than chaining one
self-join per term, the field relation is grouped by dataset and a dataset
qualifies when the number of distinct terms it matched equals the number of
terms::

    SELECT fa.dataset_id FROM dict_field_detail fa
    WHERE (fa.field_name LIKE :a OR fa.field_name LIKE :b OR ...)
    GROUP BY fa.dataset_id
    HAVING (MAX(CASE WHEN fa.field_name LIKE :a THEN 1 ELSE 0 END)
          + MAX(CASE WHEN fa.field_name LIKE :b THEN 1 ELSE 0 END) ...) = :k

A single field may satisfy several terms, exactly like the self-join form.
The subquery is non-correlated, so the database evaluates it once and the
outer query only tests id membership. An empty result simply matches
nothing; it never turns into "no filter".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .predicates import (
    LIKE_ESCAPE,
    Like,
    Membership,
    Predicate,
    RenderContext,
    SubSelect,
    like_pattern,
)


@dataclass(frozen=True)
class MatchedTermCount:
    """``HAVING`` condition: every term matched at least one grouped row."""

    column: str
    terms: Tuple[str, ...]
    prefix: str

    def render(self, ctx: RenderContext) -> str:
        hits = [
            f"MAX(CASE WHEN {self.column} LIKE {ctx.params.bind(self.prefix + '_term', like_pattern(term))} "
            f"ESCAPE '{LIKE_ESCAPE}' THEN 1 ELSE 0 END)"
            for term in self.terms
        ]
        total = ctx.params.bind(self.prefix + "_count", len(self.terms))
        return "(" + " + ".join(hits) + f") = {total}"


class FieldConjunctionResolver:
    """Builds the dataset-id set whose fields cover every requested term."""

    def __init__(
        self,
        relation: str = "dict_field_detail",
        alias: str = "fa",
        entity_column: str = "dataset_id",
        name_column: str = "field_name",
    ):
        self._relation = relation
        self._alias = alias
        self._entity_column = f"{alias}.{entity_column}"
        self._name_column = f"{alias}.{name_column}"

    def id_source(self, terms: Tuple[str, ...]) -> SubSelect:
        return SubSelect(
            columns=self._entity_column,
            source=f"{self._relation} {self._alias}",
            where=Like(self._name_column, terms, "fields_all_row"),
            group_by=self._entity_column,
            having=MatchedTermCount(self._name_column, terms, "fields_all"),
        )

    def predicate(self, column: str, terms: Tuple[str, ...]) -> Optional[Predicate]:
        """Membership of *column* in the intersection, or ``None`` without terms."""
        if not terms:
            return None
        return Membership(column, self.id_source(terms))
