"""Tests for the advanced search lookups against a seeded SQLite catalog."""

import pytest

from catalog_search.core.search.lookup_service import LookupService
from fixtures_catalog import seeded_catalog


@pytest.mark.asyncio
async def test_dataset_lookups(tmp_path):
    lookups = LookupService()
    async with seeded_catalog(tmp_path) as db:
        async with db.get_session() as session:
            sources = await lookups.get_dataset_sources(session)
            scopes = await lookups.get_dataset_scopes(session)
            tables = await lookups.get_table_names(session)
            tracking_tables = await lookups.get_table_names(session, "tracking, ")

    assert sources == ["Hdfs", "Teradata", "Oracle"]
    assert scopes == ["DWH", "DWH_STG", "ads", "derived", "legacy", "tracking"]
    assert len(tables) == 7
    assert tracking_tables == ["PageClickEvent", "PageViewEvent"]


@pytest.mark.asyncio
async def test_field_lookups(tmp_path):
    lookups = LookupService()
    async with seeded_catalog(tmp_path) as db:
        async with db.get_session() as session:
            all_fields = await lookups.get_field_names(session)
            member_fields = await lookups.get_field_names(session, "member_profile")
            literal = await lookups.get_field_names(session, "ad%click")

    assert all_fields == ["campaign_id", "member_id", "page_key", "session_key", "view_count"]
    assert member_fields == ["member_id", "session_key"]
    assert literal == []


@pytest.mark.asyncio
async def test_flow_lookups(tmp_path):
    lookups = LookupService()
    async with seeded_catalog(tmp_path) as db:
        async with db.get_session() as session:
            app_codes = await lookups.get_flow_app_codes(session)
            flows = await lookups.get_flow_names(session)
            oozie_flows = await lookups.get_flow_names(session, "OOZIE-DEV")
            jobs = await lookups.get_job_names(session)

    assert app_codes == ["AZKABAN-PROD", "OOZIE-DEV"]
    assert flows == ["ads_rollup", "member_etl", "member_sync"]
    assert oozie_flows == ["member_sync"]
    assert jobs == ["extract_member", "load_member", "rollup_ads"]
