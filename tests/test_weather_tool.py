import asyncio

import pytest
import requests

from agent.tools.orchestrator import ToolOrchestrator
from agent.tools.registry import ToolRegistry
from agent.tools.weather import (
    WeatherTool,
    clean_location_query,
    compass_direction,
    describe_weather_code,
)
from domain.exceptions import LocationNotFoundError, UpstreamServiceError
from infrastructure.weather.open_meteo import OpenMeteoClient

from conftest import StubWeatherClient


def _run(tool, params):
    registry = ToolRegistry()
    registry.register_tool(tool)
    return asyncio.run(ToolOrchestrator(registry).execute("weather", params))


def test_report_fields_are_normalized():
    client = StubWeatherClient()
    result = _run(WeatherTool(client), {"location": "Tokyo"})

    assert result.success is True
    report = result.to_dict()["result"]
    assert report == {
        "location": "Tokyo",
        "temperature": 21.5,
        "description": "Partly cloudy",
        "humidity": 64,
        "units": "celsius",
        "wind": {"speed": 13, "direction": "E"},
        "timestamp": "2025-07-15T09:00",
    }
    assert client.weather_calls == [(35.69, 139.69, "celsius")]


def test_units_are_passed_through():
    client = StubWeatherClient()
    result = _run(WeatherTool(client), {"location": "Tokyo", "units": "fahrenheit"})
    assert result.result.units == "fahrenheit"
    assert client.weather_calls[0][2] == "fahrenheit"


def test_humidity_defaults_when_missing():
    client = StubWeatherClient(current={
        "current_weather": {"temperature": 10, "weathercode": 0, "windspeed": 0, "winddirection": 0},
    })
    result = _run(WeatherTool(client), {"location": "Tokyo"})
    assert result.result.humidity == 50
    assert result.result.description == "Clear sky"


def test_filler_words_are_stripped_before_geocoding():
    client = StubWeatherClient()
    result = _run(WeatherTool(client), {"location": "current weather in Tokyo"})
    assert client.geocode_calls == ["Tokyo"]
    # The report echoes what the caller asked for
    assert result.result.location == "current weather in Tokyo"


def test_unknown_location_fails_with_message():
    result = _run(WeatherTool(StubWeatherClient(places={})), {"location": "Atlantis"})
    assert result.success is False
    assert result.error == 'Location "Atlantis" not found'


def test_invalid_units_rejected_before_any_lookup():
    client = StubWeatherClient()
    result = _run(WeatherTool(client), {"location": "Tokyo", "units": "kelvin"})
    assert result.error == "Parameter 'units' must be one of: celsius, fahrenheit"
    assert client.geocode_calls == []


def test_malformed_upstream_payload_is_wrapped():
    client = StubWeatherClient(current={"unexpected": True})
    result = _run(WeatherTool(client), {"location": "Tokyo"})
    assert result.success is False
    assert result.error.startswith("Failed to get weather data for Tokyo:")


@pytest.mark.parametrize("query, expected", [
    ("weather in Paris", "Paris"),
    ("What is the temperature for New   York", "New York"),
    ("London", "London"),
    ("the weather", "the weather"),
])
def test_clean_location_query(query, expected):
    assert clean_location_query(query) == expected


@pytest.mark.parametrize("degrees, expected", [
    (0, "N"), (11, "N"), (12, "NNE"), (90, "E"), (95, "E"),
    (180, "S"), (270, "W"), (350, "N"), (359.9, "N"),
])
def test_compass_direction(degrees, expected):
    assert compass_direction(degrees) == expected


def test_weather_code_descriptions():
    assert describe_weather_code(95) == "Thunderstorm"
    assert describe_weather_code(4) == "Unknown weather condition"
    assert describe_weather_code(None) == "Unknown weather condition"


# ---------------------------------------------------------------------------
# Open-Meteo HTTP client
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = str(payload)

    def json(self):
        return self._payload


def test_geocode_returns_first_match(monkeypatch):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen.update(url=url, params=params, timeout=timeout)
        return FakeResponse({"results": [{"name": "Paris", "latitude": 48.85, "longitude": 2.35}, {"name": "Paris, TX"}]})

    monkeypatch.setattr(requests, "get", fake_get)
    place = asyncio.run(OpenMeteoClient(timeout=3).geocode("Paris"))

    assert place["name"] == "Paris"
    assert seen["params"] == {"name": "Paris", "count": 1}
    assert seen["timeout"] == 3


def test_geocode_without_results_raises_not_found(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({}))
    with pytest.raises(LocationNotFoundError, match='Location "Nowhere" not found'):
        asyncio.run(OpenMeteoClient().geocode("Nowhere"))


def test_http_error_status_raises_upstream_error(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({"reason": "bad"}, 500))
    with pytest.raises(UpstreamServiceError, match="HTTP 500"):
        asyncio.run(OpenMeteoClient().current_weather(1.0, 2.0, "celsius"))


def test_network_failure_raises_upstream_error(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", boom)
    with pytest.raises(UpstreamServiceError, match="unreachable"):
        asyncio.run(OpenMeteoClient().geocode("Paris"))


def test_current_weather_requests_units_and_humidity(monkeypatch):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen["params"] = params
        return FakeResponse({"current_weather": {}})

    monkeypatch.setattr(requests, "get", fake_get)
    asyncio.run(OpenMeteoClient().current_weather(1.0, 2.0, "fahrenheit"))

    assert seen["params"]["temperature_unit"] == "fahrenheit"
    assert seen["params"]["current_weather"] == "true"
    assert seen["params"]["current"] == "relative_humidity_2m"
