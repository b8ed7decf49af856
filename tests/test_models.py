# Lookup Tables MCP Server
# File: tests/test_models.py
# Version: v1

"""Tests for query parameters and task progress snapshots."""

from datetime import timezone

import pytest

from lookup_tables_mcp.models import ODataQueryParameters, TaskProgress, TaskStatus


def test_query_string_omits_unset_options() -> None:
    assert ODataQueryParameters().to_query_string() is None
    assert ODataQueryParameters(filter="  ").to_query_string() is None
    assert ODataQueryParameters().append_query_string("table/T") == "table/T"


def test_query_string_fixed_order_and_escaping() -> None:
    params = ODataQueryParameters(
        orderby="Name desc",
        select="Name,City",
        filter="City in ('Roma', 'London')",
        apply="groupby((City))",
    )
    assert params.to_query_string() == (
        "$apply=groupby%28%28City%29%29"
        "&$filter=City%20in%20%28%27Roma%27%2C%20%27London%27%29"
        "&$select=Name%2CCity"
        "&$orderby=Name%20desc"
    )


def test_append_query_string() -> None:
    params = ODataQueryParameters(filter="Price gt 20")
    assert params.append_query_string("table/T") == "table/T?$filter=Price%20gt%2020"


def test_task_status_terminal_states() -> None:
    assert not TaskStatus.NotStarted.is_terminal
    assert not TaskStatus.InProgress.is_terminal
    assert TaskStatus.Completed.is_terminal
    assert TaskStatus.Failed.is_terminal
    assert TaskStatus.Cancelled.is_terminal


def test_task_status_parse() -> None:
    assert TaskStatus.parse("InProgress") is TaskStatus.InProgress
    assert TaskStatus.parse("completed") is TaskStatus.Completed
    assert TaskStatus.parse(3) is TaskStatus.Failed
    with pytest.raises(ValueError):
        TaskStatus.parse("Exploded")


def test_task_progress_from_pascal_case_payload() -> None:
    payload = {
        "Id": "42",
        "Type": "ReplaceAllRows",
        "PercentComplete": 100,
        "Status": "Failed",
        "Errors": [{"title": "Bad row", "detail": "Row 3 has too many columns", "status": 400}],
        "Result": None,
        "StartTime": "2024-05-01T10:00:00Z",
        "LastUpdateTime": "2024-05-01T10:00:05.500+00:00",
    }
    progress = TaskProgress.from_dict(payload)

    assert progress.id == "42"
    assert progress.status is TaskStatus.Failed
    assert progress.percent_complete == 100
    assert progress.errors[0].describe() == "Bad row: Row 3 has too many columns"
    assert progress.errors[0].status == 400
    assert progress.start_time.tzinfo == timezone.utc
    assert progress.last_update_time.second == 5
    assert progress.raw == payload


def test_task_progress_from_camel_case_payload() -> None:
    progress = TaskProgress.from_dict(
        {"id": "7", "status": "Completed", "percentComplete": 100, "result": {"rows": 12}}
    )
    assert progress.id == "7"
    assert progress.status is TaskStatus.Completed
    assert progress.result == {"rows": 12}
    assert progress.errors == ()
    assert progress.start_time is None
