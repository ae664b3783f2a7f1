"""Unit tests for dataset and flow/job query compilation."""

import pytest

from catalog_search.core.search.compiler import CountMode, DatasetQueryCompiler, FlowJobQueryCompiler
from catalog_search.core.search.filter_spec import PageWindow, parse_dataset_spec, parse_flow_job_spec

WINDOW = PageWindow(page=3, size=20)


def _dataset(raw, dialect="sqlite", **kwargs):
    return DatasetQueryCompiler(dialect).compile(parse_dataset_spec(raw), WINDOW, **kwargs)


class TestDatasetCompiler:
    def test_no_facets(self):
        compiled = _dataset({})
        assert compiled.section("where") == ""
        assert "WHERE" not in compiled.sql
        assert compiled.count_sql == "SELECT COUNT(*) FROM (SELECT d.id FROM dict_dataset d) AS matched"
        assert compiled.count_params == {}
        assert compiled.count_mode is CountMode.FILTERED

    def test_window_is_bound(self):
        compiled = _dataset({})
        assert compiled.sql.endswith("LIMIT :page_limit OFFSET :page_offset")
        assert compiled.params["page_limit"] == 20
        assert compiled.params["page_offset"] == 40
        assert "page_limit" not in compiled.count_params

    def test_one_where_with_and_between_groups(self):
        compiled = _dataset({"scope": {"in": "tracking"}, "sources": "Hdfs"})
        assert compiled.section("where") == "WHERE d.parent_name IN (:scope_in_0) AND d.source IN (:sources_0)"
        assert compiled.count_sql == (
            "SELECT COUNT(*) FROM (SELECT d.id FROM dict_dataset d "
            "WHERE d.parent_name IN (:scope_in_0) AND d.source IN (:sources_0)) AS matched"
        )
        assert compiled.count_params == {"scope_in_0": "tracking", "sources_0": "Hdfs"}

    def test_every_group_present(self):
        compiled = _dataset(
            {
                "scope": {"in": "a", "not": "b"},
                "table": {"in": "c", "not": "d"},
                "fields": {"any": "e", "all": "f,g", "not": "h"},
                "sources": "i",
            }
        )
        where = compiled.section("where")
        assert "AND (d.parent_name IN (:scope_in_0) AND d.parent_name NOT IN (:scope_not_0))" in where
        assert "AND (d.name LIKE :table_in_0 ESCAPE '!' AND d.name NOT LIKE :table_not_0 ESCAPE '!')" in where
        assert where.startswith("WHERE d.id IN (SELECT fd.dataset_id FROM dict_field_detail fd WHERE")
        assert "AND d.id NOT IN (SELECT fn.dataset_id FROM dict_field_detail fn" in where
        assert where.endswith("AND d.source IN (:sources_0)")

    def test_compilation_is_deterministic(self):
        raw = {"table": {"in": "a,b"}, "fields": {"all": "x,y"}, "comments": "deprecated"}
        first = _dataset(raw, candidate_ids=(1, 2))
        second = _dataset(raw, candidate_ids=(1, 2))
        assert first == second

        structured = {"table": {"in": "a,b"}, "fields": {"all": "x,y"}}
        assert _dataset(structured) == _dataset(structured)

    def test_injection_stays_in_parameters(self):
        hostile = "x'; DROP TABLE dict_dataset; --"
        compiled = _dataset({"table": {"in": hostile}, "scope": {"not": hostile}, "fields": {"all": hostile}})
        for sql in (compiled.sql, compiled.count_sql):
            assert "DROP TABLE" not in sql
            assert "'; " not in sql
        assert "x'; DROP TABLE dict_dataset; --" in compiled.params.values()
        assert "%x'; DROP TABLE dict!_dataset; --%" in compiled.params.values()

    def test_schema_column_is_quoted_per_dialect(self):
        assert "d.`schema` AS dataset_schema" in _dataset({}, dialect="mysql").sql
        assert 'd."schema" AS dataset_schema' in _dataset({}, dialect="postgresql").sql
        assert 'd."schema" AS dataset_schema' in _dataset({}, dialect="sqlite").sql

    def test_ranking_uses_table_terms(self):
        compiled = _dataset({"table": {"in": "member"}})
        assert compiled.section("order_by").startswith("ORDER BY CASE WHEN d.name IN (:rank_exact_0) THEN 0")
        assert compiled.section("order_by").endswith("d.urn, d.id")

    def test_full_text_only_path(self):
        compiler = DatasetQueryCompiler("mysql")
        spec = parse_dataset_spec({"comments": "deprecated"})
        assert compiler.uses_full_text(spec)
        assert not compiler.needs_candidate_stage(spec)

        compiled = compiler.compile(spec, WINDOW)
        assert compiled.count_mode is CountMode.UNION
        assert "MATCH(c.text) AGAINST (:comment_text_0 IN BOOLEAN MODE)" in compiled.sql
        assert "MATCH(fc.comment) AGAINST (:field_comment_text_0 IN BOOLEAN MODE)" in compiled.count_sql
        assert " UNION " in compiled.count_sql

    def test_structured_full_text_needs_candidates(self):
        compiler = DatasetQueryCompiler("sqlite")
        spec = parse_dataset_spec({"table": {"in": "member"}, "comments": "deprecated"})
        assert compiler.needs_candidate_stage(spec)
        with pytest.raises(ValueError):
            compiler.compile(spec, WINDOW)

    def test_candidate_stage_statement(self):
        compiler = DatasetQueryCompiler("sqlite")
        spec = parse_dataset_spec({"table": {"in": "member"}, "comments": "deprecated"})
        query = compiler.compile_candidates(spec)
        assert query.sql == "SELECT d.id FROM dict_dataset d WHERE d.name LIKE :table_in_0 ESCAPE '!'"
        assert query.params == {"table_in_0": "%member%"}
        assert "ORDER BY" not in query.sql
        assert "LIMIT" not in query.sql

    def test_follow_up_restricts_to_candidates(self):
        compiler = DatasetQueryCompiler("sqlite")
        spec = parse_dataset_spec({"table": {"in": "member"}, "comments": "deprecated"})
        compiled = compiler.compile(spec, WINDOW, candidate_ids=(3, 4))

        assert compiled.count_mode is CountMode.UNION
        assert compiled.section("where").startswith("WHERE (d.id IN (3, 4) AND d.id IN (")
        assert not any(name.startswith("candidate") for name in compiled.count_params)
        # Ranking still follows the table terms.
        assert "rank_exact_0" in compiled.params

    def test_unusable_free_text_is_ignored(self):
        compiler = DatasetQueryCompiler("sqlite")
        spec = parse_dataset_spec({"comments": "***"})
        assert not compiler.uses_full_text(spec)
        assert compiler.compile(spec, WINDOW).count_mode is CountMode.FILTERED


class TestFlowJobCompiler:
    def test_flow_relation_without_job_facet(self):
        compiled = FlowJobQueryCompiler("sqlite").compile(parse_flow_job_spec({"appcode": {"in": "A"}}), WINDOW)
        assert compiled.section("from") == "FROM flow f JOIN cfg_application a ON f.app_id = a.app_id"
        assert "flow_job" not in compiled.sql
        assert compiled.section("where") == "WHERE a.app_code IN (:appcode_in_0)"
        assert compiled.section("order_by") == "ORDER BY a.app_code, f.flow_name, f.flow_id"

    def test_job_relation_with_job_facet(self):
        spec = parse_flow_job_spec({"flow": {"in": "etl"}, "job": {"not": "test"}})
        compiled = FlowJobQueryCompiler("sqlite").compile(spec, WINDOW)
        assert compiled.section("from").startswith("FROM flow_job j JOIN flow f")
        assert compiled.section("where") == (
            "WHERE f.flow_name LIKE :flow_in_0 ESCAPE '!' AND j.job_name NOT LIKE :job_not_0 ESCAPE '!'"
        )
        assert compiled.section("order_by").endswith("j.job_id")
        assert "j.job_path" in compiled.section("select")

    def test_count_statement(self):
        compiled = FlowJobQueryCompiler("sqlite").compile(parse_flow_job_spec({}), WINDOW)
        assert compiled.count_sql == (
            "SELECT COUNT(*) FROM (SELECT f.flow_id FROM flow f "
            "JOIN cfg_application a ON f.app_id = a.app_id) AS matched"
        )
