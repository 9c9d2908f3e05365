"""
agent.tools.weather - Current weather conditions for a free-text location.

Resolves the location through geocoding (first match wins), then fetches
current conditions in the requested unit system. The raw Open-Meteo
weather code is mapped to a readable description and the wind bearing to
a 16-point compass direction.
"""

from __future__ import annotations

import logging
import re
from typing import Literal

from pydantic import BaseModel, Field

from agent.tools.base import BaseTool, ParameterDefinition
from domain.exceptions import LocationNotFoundError, UpstreamServiceError
from domain.ports import WeatherClientPort

logger = logging.getLogger(__name__)

WEATHER_CODES: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

_FILLER_WORDS_RE = re.compile(
    r"\b(current|weather|forecast|temperature|in|for|at|the|what|is|whats)\b",
    re.IGNORECASE,
)


class WeatherInput(BaseModel):
    """Input schema for the weather tool."""

    location: str = Field(..., description="The location to get weather for")
    units: Literal["celsius", "fahrenheit"] = Field(
        default="celsius", description="Temperature units",
    )


class Wind(BaseModel):
    speed: int
    direction: str


class WeatherReport(BaseModel):
    location: str
    temperature: float
    description: str
    humidity: float
    units: str
    wind: Wind
    timestamp: str


def describe_weather_code(code: int | None) -> str:
    if code is None:
        return "Unknown weather condition"
    return WEATHER_CODES.get(int(code), "Unknown weather condition")


def compass_direction(degrees: float) -> str:
    return COMPASS_POINTS[round(degrees / 22.5) % 16]


def clean_location_query(query: str) -> str:
    """Strip weather filler words, keeping the original if nothing is left."""
    cleaned = _FILLER_WORDS_RE.sub("", query).strip()
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned or query


class WeatherTool(BaseTool):
    """Get current weather information for a location."""

    name = "weather"
    description = "Get current weather information for a location"
    parameters = {
        "location": ParameterDefinition(
            type="string",
            description="The location to get weather for",
            required=True,
        ),
        "units": ParameterDefinition(
            type="string",
            description="Temperature units (celsius or fahrenheit)",
            enum=["celsius", "fahrenheit"],
        ),
    }

    def __init__(self, client: WeatherClientPort):
        self._client = client

    def get_schema(self) -> type[BaseModel]:
        return WeatherInput

    async def run(self, args: WeatherInput) -> WeatherReport:
        logger.info("Getting weather for %s in %s", args.location, args.units)
        query = clean_location_query(args.location)

        try:
            place = await self._client.geocode(query)
            data = await self._client.current_weather(
                place["latitude"], place["longitude"], args.units,
            )
            current = data["current_weather"]
        except LocationNotFoundError:
            raise
        except (UpstreamServiceError, KeyError, TypeError) as e:
            logger.error("Weather lookup failed for %s: %s", args.location, e)
            raise UpstreamServiceError(
                f"Failed to get weather data for {args.location}: {e}"
            ) from e

        humidity = (data.get("current") or {}).get("relative_humidity_2m") or 50
        return WeatherReport(
            location=args.location,
            temperature=round(float(current["temperature"]), 1),
            description=describe_weather_code(current.get("weathercode")),
            humidity=humidity,
            units=args.units,
            wind=Wind(
                speed=round(float(current.get("windspeed", 0))),
                direction=compass_direction(float(current.get("winddirection", 0))),
            ),
            timestamp=str(current.get("time", "")),
        )
