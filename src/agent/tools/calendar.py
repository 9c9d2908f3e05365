"""
agent.tools.calendar - Calendar events for a date range.

Backed by a fixed set of mock events. The requested range is echoed back
but not used for filtering. maxResults truncates the list; fractional
values round down and negative values yield no events.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from agent.tools.base import BaseTool, ParameterDefinition

logger = logging.getLogger(__name__)

# Simulated upstream latency in seconds
MOCK_LATENCY = 0.15


class CalendarInput(BaseModel):
    """Input schema for the calendar tool."""

    model_config = ConfigDict(populate_by_name=True)

    start_date: str = Field(..., alias="startDate")
    end_date: str = Field(..., alias="endDate")
    max_results: float = Field(default=10, alias="maxResults")


class EventTime(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_time: str = Field(..., alias="dateTime")


class CalendarEvent(BaseModel):
    id: str
    summary: str
    start: EventTime
    end: EventTime
    location: Optional[str] = None
    description: Optional[str] = None
    attendees: list[str] = Field(default_factory=list)


class DateRange(BaseModel):
    start: str
    end: str


class CalendarListing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    events: list[CalendarEvent]
    total_count: int = Field(..., alias="totalCount")
    date_range: DateRange = Field(..., alias="dateRange")


def _event(
    event_id: str, summary: str, start: str, end: str,
    location: str, description: str, attendees: list[str],
) -> CalendarEvent:
    return CalendarEvent(
        id=event_id,
        summary=summary,
        start=EventTime(dateTime=start),
        end=EventTime(dateTime=end),
        location=location,
        description=description,
        attendees=attendees,
    )


def mock_events() -> list[CalendarEvent]:
    return [
        _event("1", "Team Standup",
               "2025-07-15T09:00:00Z", "2025-07-15T09:30:00Z",
               "Conference Room A", "Daily team standup meeting",
               ["team@company.com"]),
        _event("2", "Project Review",
               "2025-07-15T14:00:00Z", "2025-07-15T15:30:00Z",
               "Online - Zoom", "Review project progress and deliverables",
               ["pm@company.com", "dev@company.com"]),
        _event("3", "Client Call",
               "2025-07-16T09:00:00Z", "2025-07-16T10:00:00Z",
               "Phone", "Discuss requirements and timeline",
               ["client@example.com"]),
        _event("4", "Code Review",
               "2025-07-16T11:00:00Z", "2025-07-16T12:00:00Z",
               "Dev Room", "Review pull requests and code quality",
               ["dev-team@company.com"]),
        _event("5", "Lunch Meeting",
               "2025-07-16T12:30:00Z", "2025-07-16T13:30:00Z",
               "Restaurant Downtown", "Business lunch with partners",
               ["partner@business.com"]),
    ]


class CalendarTool(BaseTool):
    name = "calendar"
    description = "Get calendar events for a date range"
    parameters = {
        "startDate": ParameterDefinition(
            type="string",
            description="Start date in ISO format (YYYY-MM-DDTHH:MM:SSZ)",
            format="date-time",
            required=True,
        ),
        "endDate": ParameterDefinition(
            type="string",
            description="End date in ISO format (YYYY-MM-DDTHH:MM:SSZ)",
            format="date-time",
            required=True,
        ),
        "maxResults": ParameterDefinition(
            type="number",
            description="Maximum number of events to return (default: 10)",
        ),
    }

    def __init__(self, latency: float = MOCK_LATENCY):
        self._latency = latency

    def get_schema(self) -> type[BaseModel]:
        return CalendarInput

    async def run(self, args: CalendarInput) -> CalendarListing:
        logger.info(
            "Getting calendar events from %s to %s", args.start_date, args.end_date,
        )
        if self._latency:
            await asyncio.sleep(self._latency)

        limit = max(0, int(args.max_results))
        events = mock_events()[:limit]
        return CalendarListing(
            events=events,
            totalCount=len(events),
            dateRange=DateRange(start=args.start_date, end=args.end_date),
        )
