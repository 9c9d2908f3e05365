"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the pipeline needs without specifying HOW. Infrastructure
modules provide concrete implementations; the agent and the session service
depend only on these protocols. Implementations satisfy them structurally,
without inheriting from them.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from domain.entities import Message, Session
from domain.models import ToolResult


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@runtime_checkable
class SessionBackend(Protocol):
    """Raw key/value persistence of Session objects with an idle TTL."""

    async def load(self, session_id: str) -> Optional[Session]: ...
    async def store(self, session: Session, ttl_seconds: int) -> None: ...
    async def delete(self, session_id: str) -> None: ...
    async def expire(self, session_id: str, ttl_seconds: int) -> None: ...
    async def keys(self) -> list[str]: ...


# ---------------------------------------------------------------------------
# Generative model
# ---------------------------------------------------------------------------

@runtime_checkable
class ResponseSynthesizerPort(Protocol):
    """Turn a user message, prior turns and tool output into a reply."""

    async def synthesize(
        self,
        user_message: str,
        history: list[Message],
        tool_results: list[ToolResult],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


@runtime_checkable
class FallbackResponseProvider(Protocol):
    """Canned reply used when the generative model is unavailable."""

    def general_reply(self, message: str) -> str: ...


# ---------------------------------------------------------------------------
# External data sources
# ---------------------------------------------------------------------------

@runtime_checkable
class WeatherClientPort(Protocol):
    """Geocoding + current-conditions lookup."""

    async def geocode(self, location: str) -> dict[str, Any]: ...

    async def current_weather(
        self, latitude: float, longitude: float, temperature_unit: str,
    ) -> dict[str, Any]: ...
