"""
infrastructure.weather.open_meteo - HTTP client for the Open-Meteo APIs.

Implements WeatherClientPort with two keyless endpoints:
  - geocoding-api.open-meteo.com  free-text place name -> coordinates
  - api.open-meteo.com/v1/forecast current conditions for coordinates

Uses requests via run_in_executor for async compat. Each call is a single
attempt with a client-level timeout; failures surface as
UpstreamServiceError so the weather tool can describe them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from domain.exceptions import LocationNotFoundError, UpstreamServiceError

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"


class OpenMeteoClient:
    """Geocode locations and fetch current weather from Open-Meteo."""

    def __init__(
        self,
        geocoding_url: str = GEOCODING_URL,
        forecast_url: str = FORECAST_URL,
        timeout: float = 10.0,
    ):
        self._geocoding_url = geocoding_url
        self._forecast_url = forecast_url
        self._timeout = timeout

    async def geocode(self, location: str) -> dict[str, Any]:
        """Return the first geocoding match for *location*.

        Raises:
            LocationNotFoundError: If the lookup returns no results.
            UpstreamServiceError: If the service is unreachable or errors.
        """
        data = await self._get_json(
            self._geocoding_url, {"name": location, "count": 1},
        )
        results = data.get("results") or []
        if not results:
            raise LocationNotFoundError(f'Location "{location}" not found')
        return results[0]

    async def current_weather(
        self, latitude: float, longitude: float, temperature_unit: str,
    ) -> dict[str, Any]:
        return await self._get_json(
            self._forecast_url,
            {
                "latitude": latitude,
                "longitude": longitude,
                "current_weather": "true",
                "current": "relative_humidity_2m",
                "temperature_unit": temperature_unit,
            },
        )

    async def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._call_service, url, params)

    def _call_service(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        """Synchronous HTTP GET (runs in thread pool)."""
        logger.debug("GET %s %s", url, params)
        try:
            response = requests.get(url, params=params, timeout=self._timeout)
        except requests.exceptions.Timeout as e:
            raise UpstreamServiceError(
                f"Open-Meteo timed out after {self._timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            raise UpstreamServiceError(f"Open-Meteo unreachable: {e}") from e

        if not response.ok:
            raise UpstreamServiceError(
                f"Open-Meteo returned HTTP {response.status_code}: {response.text[:200]}"
            )
        return response.json()
