# catalog_search/core/search/full_text.py
"""
Comment full-text stage for dataset search.

Free text is matched against two annotation corpora:

* dataset annotations: ``comments.text``
* field annotations: ``field_comments.comment`` reached through
  ``dict_dataset_field_comment``

Each corpus yields a set of dataset ids; the two sets are combined with
``UNION`` and the outer query tests membership of ``d.id``.

Matching is dialect specific:

* MySQL: ``MATCH(col) AGAINST (:q IN BOOLEAN MODE)`` with ``word*`` terms
* PostgreSQL: ``to_tsvector('english', col) @@ to_tsquery('english', :q)``
  with ``word:* | word:*``
* anything else (SQLite in development and tests): case-insensitive
  substring match of each word

In every dialect a document matches when any word of the query matches.
The query is reduced to word characters first so operator characters of the
native full-text syntax never reach the database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .predicates import (
    LIKE_ESCAPE,
    AllOf,
    IdLiteralList,
    MatchNothing,
    Membership,
    Predicate,
    RenderContext,
    SubSelect,
    UnionSelect,
    like_pattern,
)


def fts_words(query: str) -> List[str]:
    """Split free text into words, dropping full-text operator characters."""
    return re.sub(r"[^\w\s]", " ", query or "").split()


@dataclass(frozen=True)
class FullTextMatch:
    """Any-word full-text match of *query* against *column*."""

    column: str
    query: str
    prefix: str

    def render(self, ctx: RenderContext) -> str:
        words = fts_words(self.query)
        if not words:
            return MatchNothing().render(ctx)

        if ctx.dialect == "mysql":
            terms = " ".join(f"{w}*" for w in words)
            return f"MATCH({self.column}) AGAINST ({ctx.params.bind(self.prefix, terms)} IN BOOLEAN MODE)"

        if ctx.dialect == "postgresql":
            terms = " | ".join(f"{w}:*" for w in words)
            return (
                f"to_tsvector('english', {self.column}) @@ "
                f"to_tsquery('english', {ctx.params.bind(self.prefix, terms)})"
            )

        parts = [
            f"LOWER({self.column}) LIKE {ctx.params.bind(self.prefix, like_pattern(w.lower()))} "
            f"ESCAPE '{LIKE_ESCAPE}'"
            for w in words
        ]
        if len(parts) == 1:
            return parts[0]
        return "(" + " OR ".join(parts) + ")"


class CommentFullTextStage:
    """Builds the dataset-id union of both annotation corpora."""

    DATASET_CORPUS = "comments c"
    FIELD_CORPUS = "dict_dataset_field_comment dfc JOIN field_comments fc ON fc.id = dfc.comment_id"

    @staticmethod
    def has_terms(query: str) -> bool:
        return bool(fts_words(query))

    def id_source(self, query: str) -> UnionSelect:
        return UnionSelect(
            (
                SubSelect(
                    columns="c.dataset_id",
                    source=self.DATASET_CORPUS,
                    where=FullTextMatch("c.text", query, "comment_text"),
                ),
                SubSelect(
                    columns="dfc.dataset_id",
                    source=self.FIELD_CORPUS,
                    where=FullTextMatch("fc.comment", query, "field_comment_text"),
                ),
            )
        )

    def predicate(
        self,
        column: str,
        query: str,
        candidate_ids: Optional[Tuple[int, ...]] = None,
    ) -> Predicate:
        """
        Membership of *column* in the full-text union.

        With *candidate_ids* (ids already narrowed by structured facets) the
        union is intersected with that id list, written into the statement as
        integer literals. An empty list matches nothing.
        """
        matched = Membership(column, self.id_source(query))
        if candidate_ids is None:
            return matched
        return AllOf((IdLiteralList(column, candidate_ids), matched))
