"""
infrastructure.llm.prompt - System prompt and tool-context templates.

The tool context is a plain-text block with one "**NAME TOOL RESULT:**"
section per executed tool. Weather and calendar results have dedicated
formatters; anything else is dumped as indented JSON.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Sequence

from domain.models import ToolResult, to_jsonable

TOOL_CONTEXT_HEADER = (
    "I have executed the following tools and received these results:\n\n"
)

SYSTEM_PROMPT_INTRO = (
    "You are a helpful AI assistant. Your role is to process and understand "
    "data from various tools and provide natural, conversational responses "
    "to users."
)

SYSTEM_PROMPT_INSTRUCTIONS = """INSTRUCTIONS:
1. Use the tool context above to provide accurate, helpful responses
2. If weather data is provided, describe the conditions naturally and offer relevant suggestions
3. Be conversational and engaging in your responses
4. If you don't have enough information, ask clarifying questions
5. Focus on being helpful and informative while maintaining a friendly tone

Remember: You are processing real data from tools, so provide accurate information based on the context provided."""


def _or_unknown(value: Any) -> Any:
    return "Unknown" if value in (None, "") else value


def format_weather(data: Any) -> str:
    if not data:
        return "No weather data available\n\n"
    if not isinstance(data, dict):
        return format_generic(data)
    wind = data.get("wind") or {}
    scale = "F" if data.get("units") == "fahrenheit" else "C"
    return (
        f"Location: {_or_unknown(data.get('location'))}\n"
        f"Temperature: {_or_unknown(data.get('temperature'))}°{scale}\n"
        f"Conditions: {_or_unknown(data.get('description'))}\n"
        f"Humidity: {_or_unknown(data.get('humidity'))}%\n"
        f"Wind: {_or_unknown(wind.get('speed'))} km/h from "
        f"{_or_unknown(wind.get('direction'))}\n\n"
    )


def format_calendar(data: Any) -> str:
    if not data:
        return "No calendar data available\n\n"
    return f"Calendar data: {json.dumps(data, indent=2)}\n\n"


def format_generic(data: Any) -> str:
    return f"{json.dumps(data, indent=2, default=str)}\n\n"


FORMATTERS: dict[str, Callable[[Any], str]] = {
    "weather": format_weather,
    "calendar": format_calendar,
}


def build_tool_context(tool_results: Sequence[ToolResult]) -> str:
    if not tool_results:
        return ""

    parts = [TOOL_CONTEXT_HEADER]
    for item in tool_results:
        parts.append(f"**{item.tool_name.upper()} TOOL RESULT:**\n")
        if item.error:
            parts.append(f"Error: {item.error}\n\n")
            continue
        formatter = FORMATTERS.get(item.tool_name, format_generic)
        parts.append(formatter(to_jsonable(item.result)))
    return "".join(parts)


def build_system_prompt(tool_context: str = "") -> str:
    context_section = f"TOOL CONTEXT:\n{tool_context}" if tool_context else ""
    return f"{SYSTEM_PROMPT_INTRO}\n\n{context_section}\n\n{SYSTEM_PROMPT_INSTRUCTIONS}"
