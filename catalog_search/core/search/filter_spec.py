# catalog_search/core/search/filter_spec.py
"""
Filter specification normalization for advanced search.

Callers send a loosely-typed nested structure, for example::

    {
        "scope": {"in": "TRACKING, DWH_DIM", "not": ""},
        "table": {"in": "PageView"},
        "fields": {"any": "member_id", "all": "", "not": "password"},
        "sources": "Hdfs,Teradata",
        "comments": "deprecated"
    }

Normalization is permissive: every facet value may be a comma-delimited
string or a list of strings, values are trimmed, blanks are dropped and
duplicates collapse to their first occurrence. Anything that cannot be read
as a value list degrades to "no constraint from this facet"; only a top-level
value that is not a mapping is treated as "no spec at all".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

Values = Tuple[str, ...]


def split_values(raw: Any) -> Values:
    """
    Split a facet value into trimmed, non-blank, de-duplicated entries.

    Accepts a comma-delimited string, a number, or a list/tuple of those.
    Any other shape yields an empty tuple.
    """
    if isinstance(raw, bool) or raw is None:
        return ()
    if isinstance(raw, (int, float)):
        raw = str(raw)
    if isinstance(raw, str):
        candidates = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        candidates = []
        for item in raw:
            candidates.extend(split_values(item))
    else:
        return ()

    seen = set()
    values = []
    for candidate in candidates:
        value = candidate.strip()
        if value and value not in seen:
            seen.add(value)
            values.append(value)
    return tuple(values)


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name)
    return section if isinstance(section, Mapping) else {}


def _free_text(raw: Any) -> str:
    if isinstance(raw, bool) or raw is None:
        return ""
    if isinstance(raw, (int, float)):
        return str(raw)
    if isinstance(raw, str):
        return raw.strip()
    return ""


@dataclass(frozen=True)
class FacetValues:
    """Include / exclude value lists for one facet."""

    include: Values = ()
    exclude: Values = ()

    @property
    def is_active(self) -> bool:
        return bool(self.include or self.exclude)

    @classmethod
    def from_section(cls, section: Mapping[str, Any]) -> "FacetValues":
        return cls(include=split_values(section.get("in")), exclude=split_values(section.get("not")))


@dataclass(frozen=True)
class FieldFacet:
    """Field-name constraints: match any term, match all terms, match none."""

    any: Values = ()
    all: Values = ()
    exclude: Values = ()

    @property
    def is_active(self) -> bool:
        return bool(self.any or self.all or self.exclude)

    @classmethod
    def from_section(cls, section: Mapping[str, Any]) -> "FieldFacet":
        return cls(
            any=split_values(section.get("any")),
            all=split_values(section.get("all")),
            exclude=split_values(section.get("not")),
        )


@dataclass(frozen=True)
class DatasetFilterSpec:
    """Normalized dataset search constraints."""

    scope: FacetValues = FacetValues()
    table: FacetValues = FacetValues()
    fields: FieldFacet = FieldFacet()
    sources: Values = ()
    comments: str = ""

    @property
    def has_structured_facets(self) -> bool:
        return self.scope.is_active or self.table.is_active or self.fields.is_active or bool(self.sources)

    @property
    def has_full_text(self) -> bool:
        return bool(self.comments)


@dataclass(frozen=True)
class FlowJobFilterSpec:
    """Normalized flow/job search constraints."""

    appcode: FacetValues = FacetValues()
    flow: FacetValues = FacetValues()
    job: FacetValues = FacetValues()

    @property
    def uses_job_relation(self) -> bool:
        return self.job.is_active


def parse_dataset_spec(raw: Any) -> Optional[DatasetFilterSpec]:
    """Normalize a dataset filter structure; ``None`` when *raw* is not a mapping."""
    if not isinstance(raw, Mapping):
        return None
    return DatasetFilterSpec(
        scope=FacetValues.from_section(_section(raw, "scope")),
        table=FacetValues.from_section(_section(raw, "table")),
        fields=FieldFacet.from_section(_section(raw, "fields")),
        sources=split_values(raw.get("sources")),
        comments=_free_text(raw.get("comments")),
    )


def parse_flow_job_spec(raw: Any) -> Optional[FlowJobFilterSpec]:
    """Normalize a flow/job filter structure; ``None`` when *raw* is not a mapping."""
    if not isinstance(raw, Mapping):
        return None
    return FlowJobFilterSpec(
        appcode=FacetValues.from_section(_section(raw, "appcode")),
        flow=FacetValues.from_section(_section(raw, "flow")),
        job=FacetValues.from_section(_section(raw, "job")),
    )


@dataclass(frozen=True)
class PageWindow:
    """1-based page number and page length; ``offset`` is the row offset."""

    page: int
    size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size

    @classmethod
    def normalize(cls, page: Any, size: Any, default_size: int, max_size: int) -> "PageWindow":
        """Clamp caller paging values: page >= 1, 0 < size <= max_size."""
        try:
            page_number = int(page)
        except (TypeError, ValueError):
            page_number = 1
        try:
            page_size = int(size)
        except (TypeError, ValueError):
            page_size = default_size

        if page_number < 1:
            page_number = 1
        if page_size < 1:
            page_size = default_size
        return cls(page=page_number, size=min(page_size, max_size))
