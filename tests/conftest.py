import sys
from pathlib import Path
from typing import Any, Optional

import pytest
import redis.exceptions

# Ensure src/ is importable for tests
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from agent.fallback import FixedFallbackResponses  # noqa: E402
from domain.exceptions import LocationNotFoundError  # noqa: E402
from factory import ServiceFactory  # noqa: E402
from infrastructure.cache.session_backend import (  # noqa: E402
    FallbackSessionBackend,
    InMemorySessionBackend,
)
from infrastructure.config import Settings  # noqa: E402


class StubWeatherClient:
    """Answers like Open-Meteo for a fixed set of places."""

    def __init__(self, places: Optional[dict[str, dict[str, Any]]] = None, current: Optional[dict] = None):
        self.places = places if places is not None else {
            "Tokyo": {"name": "Tokyo", "country": "Japan", "latitude": 35.69, "longitude": 139.69},
        }
        self.current = current if current is not None else {
            "current_weather": {
                "temperature": 21.46,
                "weathercode": 2,
                "windspeed": 12.6,
                "winddirection": 95,
                "time": "2025-07-15T09:00",
            },
            "current": {"relative_humidity_2m": 64},
        }
        self.geocode_calls: list[str] = []
        self.weather_calls: list[tuple] = []

    async def geocode(self, location: str) -> dict[str, Any]:
        self.geocode_calls.append(location)
        if location not in self.places:
            raise LocationNotFoundError(f'Location "{location}" not found')
        return self.places[location]

    async def current_weather(self, latitude, longitude, temperature_unit):
        self.weather_calls.append((latitude, longitude, temperature_unit))
        return self.current


class StubSynthesizer:
    """Records every call and returns a fixed reply, or raises *error*."""

    def __init__(self, reply: str = "stub reply", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def synthesize(self, user_message, history, tool_results, *, temperature, max_tokens):
        self.calls.append({
            "user_message": user_message,
            "history": list(history),
            "tool_results": list(tool_results),
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        return self.reply


class FailingRedis:
    """Redis client whose every command fails as if the server were down."""

    def __init__(self):
        self.calls = 0

    def _fail(self, *args, **kwargs):
        self.calls += 1
        raise redis.exceptions.ConnectionError("Connection refused")

    async def ping(self):
        self._fail()

    async def get(self, key):
        self._fail()

    async def set(self, key, value, ex=None):
        self._fail()

    async def delete(self, key):
        self._fail()

    async def expire(self, key, ttl):
        self._fail()

    async def aclose(self):
        pass


class DictRedis:
    """In-process stand-in for a healthy Redis server."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def ping(self):
        return True

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex

    async def delete(self, key):
        self.data.pop(key, None)

    async def expire(self, key, ttl):
        if key in self.data:
            self.ttls[key] = ttl

    async def scan_iter(self, match=None):
        prefix = (match or "*").rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key

    async def aclose(self):
        pass


class FlakyRedis(DictRedis):
    """DictRedis that starts refusing every command once ``down`` is set."""

    def __init__(self):
        super().__init__()
        self.down = False

    def _check(self):
        if self.down:
            raise redis.exceptions.ConnectionError("Connection reset by peer")

    async def ping(self):
        self._check()
        return await super().ping()

    async def get(self, key):
        self._check()
        return await super().get(key)

    async def set(self, key, value, ex=None):
        self._check()
        await super().set(key, value, ex=ex)

    async def delete(self, key):
        self._check()
        await super().delete(key)

    async def expire(self, key, ttl):
        self._check()
        await super().expire(key, ttl)

    async def scan_iter(self, match=None):
        self._check()
        async for key in super().scan_iter(match=match):
            yield key


@pytest.fixture
def settings() -> Settings:
    return Settings(redis_enabled=False, openai_api_key="")


@pytest.fixture
def weather_client() -> StubWeatherClient:
    return StubWeatherClient()


@pytest.fixture
def synthesizer() -> StubSynthesizer:
    return StubSynthesizer()


@pytest.fixture
def factory(settings, weather_client, synthesizer) -> ServiceFactory:
    return ServiceFactory(
        settings,
        session_backend=FallbackSessionBackend(None, InMemorySessionBackend()),
        weather_client=weather_client,
        synthesizer=synthesizer,
        fallback=FixedFallbackResponses(0),
    )
