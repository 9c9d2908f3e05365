import asyncio

import pytest

from agent.tools.calendar import CalendarTool
from agent.tools.database import SAFE_QUERIES, DatabaseTool
from agent.tools.orchestrator import ToolOrchestrator
from agent.tools.registry import ToolRegistry


@pytest.fixture
def orchestrator() -> ToolOrchestrator:
    registry = ToolRegistry()
    registry.register_tool(CalendarTool(latency=0))
    registry.register_tool(DatabaseTool())
    return ToolOrchestrator(registry)


RANGE = {"startDate": "2025-07-15T00:00:00Z", "endDate": "2025-07-22T00:00:00Z"}


def test_calendar_returns_all_mock_events_by_default(orchestrator):
    result = asyncio.run(orchestrator.execute("calendar", RANGE))

    assert result.success is True
    body = result.to_dict()["result"]
    assert body["totalCount"] == 5
    assert [e["id"] for e in body["events"]] == ["1", "2", "3", "4", "5"]
    assert body["events"][0]["summary"] == "Team Standup"
    assert body["events"][0]["start"] == {"dateTime": "2025-07-15T09:00:00Z"}
    assert body["dateRange"] == {"start": RANGE["startDate"], "end": RANGE["endDate"]}


def test_calendar_max_results_truncates(orchestrator):
    result = asyncio.run(orchestrator.execute("calendar", {**RANGE, "maxResults": 2}))
    body = result.to_dict()["result"]
    assert body["totalCount"] == 2
    assert [e["summary"] for e in body["events"]] == ["Team Standup", "Project Review"]


def test_calendar_fractional_max_results_rounds_down(orchestrator):
    result = asyncio.run(orchestrator.execute("calendar", {**RANGE, "maxResults": 2.5}))
    assert result.success is True
    assert result.to_dict()["result"]["totalCount"] == 2


def test_calendar_negative_max_results_returns_no_events(orchestrator):
    result = asyncio.run(orchestrator.execute("calendar", {**RANGE, "maxResults": -1}))
    assert result.success is True
    body = result.to_dict()["result"]
    assert body["events"] == []
    assert body["totalCount"] == 0


def test_calendar_requires_iso_datetimes(orchestrator):
    result = asyncio.run(orchestrator.execute("calendar", {"startDate": "tomorrow"}))
    assert result.success is False
    assert result.error == (
        "Parameter 'startDate' must match format: date-time; "
        "Required parameter 'endDate' is missing"
    )


def test_calendar_simulates_latency():
    tool = CalendarTool(latency=0.01)
    listing = asyncio.run(tool.execute(RANGE))
    assert listing.total_count == 5


@pytest.mark.parametrize("query_type, key, value", [
    ("user_count", "value", 1250),
    ("system_stats", "active_sessions", 45),
    ("system_stats", "uptime", "5 days, 12 hours"),
    ("recent_messages", "count", 2),
])
def test_database_queries(orchestrator, query_type, key, value):
    result = asyncio.run(orchestrator.execute("database", {"query_type": query_type}))
    assert result.success is True
    assert result.result[key] == value


def test_database_generic_lists_available_queries(orchestrator):
    result = asyncio.run(orchestrator.execute(
        "database", {"query_type": "generic", "filters": {"since": "today"}},
    ))
    assert result.result["available_queries"] == SAFE_QUERIES
    assert result.result["filters"] == {"since": "today"}


def test_database_rejects_unknown_query_type(orchestrator):
    result = asyncio.run(orchestrator.execute("database", {"query_type": "drop_tables"}))
    assert result.success is False
    assert result.error.startswith("Parameter 'query_type' must be one of:")
