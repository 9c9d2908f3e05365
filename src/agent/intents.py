"""
agent.intents - Keyword intent recognition and tool selection.

Each intent family is a fixed keyword set with a fixed confidence. Families
are not mutually exclusive: a message that mentions both the weather and a
meeting yields two intents and two tool selections. A message that matches
nothing yields a single general_conversation intent and no tools.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Any, Optional, Sequence

from domain.entities import Message, utcnow
from domain.models import IntentRecognition, ToolSelection

logger = logging.getLogger(__name__)

WEATHER_INTENT = "weather_query"
CALENDAR_INTENT = "calendar_query"
DATABASE_INTENT = "database_query"
GENERAL_INTENT = "general_conversation"

WEATHER_KEYWORDS = ("weather", "temperature", "forecast")
CALENDAR_KEYWORDS = ("calendar", "schedule", "meeting")
DATABASE_KEYWORDS = ("database", "statistics", "stats", "user count", "recent messages")

WEATHER_CONFIDENCE = 0.8
CALENDAR_CONFIDENCE = 0.7
DATABASE_CONFIDENCE = 0.5
GENERAL_CONFIDENCE = 0.6

DEFAULT_LOCATION = "current location"
DEFAULT_CALENDAR_WINDOW = timedelta(days=7)

_LOCATION_RE = re.compile(r"\bin\s+([a-zA-Z][a-zA-Z\s\-'.]*)", re.IGNORECASE)
_TRAILING_TIME_RE = re.compile(
    r"\s+(right now|this week|today|tomorrow|tonight|now)$", re.IGNORECASE,
)


def extract_location(text: str) -> Optional[str]:
    """Return the place named after "in", without trailing punctuation or time words."""
    match = _LOCATION_RE.search(text)
    if not match:
        return None
    location = match.group(1).strip().rstrip(".'- ")
    while True:
        trimmed = _TRAILING_TIME_RE.sub("", location).strip()
        if trimmed == location:
            break
        location = trimmed
    return location or None


def extract_start_date(text: str) -> dict[str, Any]:
    lowered = text.lower()
    now = utcnow()
    if "tomorrow" in lowered:
        return {"startDate": now + timedelta(days=1)}
    if "today" in lowered:
        return {"startDate": now}
    return {}


def classify_database_query(text: str) -> str:
    lowered = text.lower()
    if "user" in lowered and "count" in lowered:
        return "user_count"
    if "recent" in lowered and "message" in lowered:
        return "recent_messages"
    if "stats" in lowered or "statistics" in lowered:
        return "system_stats"
    return "generic"


def _mentions(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


class IntentEngine:
    """Map free text to intents, and intents to tool calls."""

    def recognize_intents(
        self, text: str, history: Sequence[Message] = (),
    ) -> list[IntentRecognition]:
        lowered = text.lower()
        intents: list[IntentRecognition] = []

        if _mentions(lowered, WEATHER_KEYWORDS):
            intents.append(IntentRecognition(
                intent=WEATHER_INTENT,
                confidence=WEATHER_CONFIDENCE,
                entities={"location": extract_location(text)},
            ))

        if _mentions(lowered, CALENDAR_KEYWORDS):
            intents.append(IntentRecognition(
                intent=CALENDAR_INTENT,
                confidence=CALENDAR_CONFIDENCE,
                entities=extract_start_date(text),
            ))

        if _mentions(lowered, DATABASE_KEYWORDS):
            intents.append(IntentRecognition(
                intent=DATABASE_INTENT,
                confidence=DATABASE_CONFIDENCE,
                entities={"query_type": classify_database_query(text)},
            ))

        if not intents:
            intents.append(IntentRecognition(
                intent=GENERAL_INTENT, confidence=GENERAL_CONFIDENCE,
            ))

        logger.debug("Recognized intents: %s", [i.intent for i in intents])
        return intents

    def select_tools(
        self,
        intents: Sequence[IntentRecognition],
        context: Optional[dict[str, Any]] = None,
    ) -> list[ToolSelection]:
        selections: list[ToolSelection] = []

        for intent in intents:
            if intent.intent == WEATHER_INTENT:
                selections.append(ToolSelection(
                    tool_name="weather",
                    confidence=intent.confidence,
                    params={"location": intent.entities.get("location") or DEFAULT_LOCATION},
                ))
            elif intent.intent == CALENDAR_INTENT:
                now = utcnow()
                start = intent.entities.get("startDate") or now
                end = intent.entities.get("endDate") or now + DEFAULT_CALENDAR_WINDOW
                selections.append(ToolSelection(
                    tool_name="calendar",
                    confidence=intent.confidence,
                    params={"startDate": _iso(start), "endDate": _iso(end)},
                ))
            elif intent.intent == DATABASE_INTENT:
                selections.append(ToolSelection(
                    tool_name="database",
                    confidence=intent.confidence,
                    params={"query_type": intent.entities.get("query_type") or "generic"},
                ))

        # sorted() is stable, so ties keep recognition order
        selections = sorted(selections, key=lambda s: s.confidence, reverse=True)
        logger.debug("Selected tools: %s", [s.tool_name for s in selections])
        return selections


def _iso(value: Any) -> str:
    return value.isoformat() if hasattr(value, "isoformat") else str(value)
