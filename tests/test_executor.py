"""Unit tests for PagedExecutor using mocked connections."""

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog_search.core.search.compiler import DatasetQueryCompiler, FlowJobQueryCompiler, IdQuery
from catalog_search.core.search.executor import PagedExecutor, dataset_executor, flow_job_executor
from catalog_search.core.search.filter_spec import PageWindow, parse_dataset_spec, parse_flow_job_spec

WINDOW = PageWindow(page=1, size=10)


def _row(**values):
    return SimpleNamespace(_mapping=values)


def _result(rows=None, first=None):
    result = MagicMock()
    result.fetchall.return_value = rows or []
    result.first.return_value = first
    return result


def _session(*results):
    connection = MagicMock()
    connection.execute = AsyncMock(side_effect=list(results))
    session = MagicMock()
    session.connection = AsyncMock(return_value=connection)
    return session, connection


DATASET_ROW = _row(id=1, name="PageViewEvent", source="Hdfs", urn="hdfs://data/tracking/PageViewEvent", dataset_schema="{}")


@pytest.mark.asyncio
async def test_primary_then_count_on_one_connection():
    compiled = DatasetQueryCompiler("sqlite").compile(parse_dataset_spec({"table": {"in": "Page"}}), WINDOW)
    session, connection = _session(_result(rows=[DATASET_ROW]), _result(first=(57,)))

    page = await dataset_executor().execute(session, compiled, WINDOW)

    session.connection.assert_awaited_once()
    assert connection.execute.await_count == 2
    primary_call, count_call = connection.execute.await_args_list
    assert str(primary_call.args[0]) == compiled.sql
    assert primary_call.args[1] == compiled.params
    assert str(count_call.args[0]) == compiled.count_sql
    assert count_call.args[1] == compiled.count_params

    assert page.count == 57
    assert page.total_pages == 6
    assert page.data[0].name == "PageViewEvent"
    assert page.data[0].schema == "{}"


@pytest.mark.asyncio
async def test_missing_count_row_defaults_to_zero(caplog):
    compiled = DatasetQueryCompiler("sqlite").compile(parse_dataset_spec({}), WINDOW)
    session, _ = _session(_result(rows=[DATASET_ROW]), _result(first=None))

    with caplog.at_level(logging.WARNING, logger="catalog_search.search"):
        page = await dataset_executor().execute(session, compiled, WINDOW)

    assert page.count == 0
    assert page.total_pages == 0
    assert len(page.data) == 1
    assert "Count statement returned no row" in caplog.text


@pytest.mark.asyncio
async def test_flow_rows_with_job_relation():
    spec = parse_flow_job_spec({"job": {"in": "extract"}})
    compiled = FlowJobQueryCompiler("sqlite").compile(spec, WINDOW)
    row = _row(
        app_code="AZKABAN-PROD", flow_id=10, flow_name="member_etl", flow_path="etl/member_etl",
        flow_group="growth", job_id=100, job_name="extract_member",
        job_path="etl/member_etl/extract_member", job_type="hadoopJava",
    )
    session, _ = _session(_result(rows=[row]), _result(first=(1,)))

    page = await flow_job_executor(with_job=True).execute(session, compiled, WINDOW)

    assert page.is_flow_job
    item = page.to_dict()["data"][0]
    assert item["displayName"] == "extract_member"
    assert item["path"] == "AZKABAN-PROD/etl/member_etl/extract_member"


@pytest.mark.asyncio
async def test_fetch_ids():
    session, connection = _session(_result(rows=[(3,), (4,)]))
    ids = await PagedExecutor.fetch_ids(session, IdQuery(sql="SELECT d.id FROM dict_dataset d", params={}))
    assert ids == (3, 4)
    connection.execute.assert_awaited_once()
