"""
factory - Composition root for the chat agent backend.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, REST/WebSocket) call this factory to get
fully configured services and agents.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    # Direct tool access (/mcp surface):
    result = await factory.orchestrator.execute("weather", {"location": "Paris"})

    # Conversational agent (CLI, WebSocket):
    agent = factory.create_agent()
    response = await agent.process_message(text, history, context)

    await factory.shutdown()
"""

from __future__ import annotations

import logging
from typing import Optional

from agent.executor import ConversationAgent
from agent.fallback import RandomFallbackResponses
from agent.intents import IntentEngine
from agent.tools.calendar import CalendarTool
from agent.tools.database import DatabaseTool
from agent.tools.orchestrator import ToolOrchestrator
from agent.tools.registry import ToolRegistry
from agent.tools.validator import ParameterValidator
from agent.tools.weather import WeatherTool
from application.services.session_store import SessionService
from domain.ports import FallbackResponseProvider, ResponseSynthesizerPort, WeatherClientPort
from infrastructure.cache.session_backend import (
    FallbackSessionBackend,
    InMemorySessionBackend,
    RedisSessionBackend,
)
from infrastructure.config import Settings
from infrastructure.llm.llm_builder import llm_factory_from_settings
from infrastructure.llm.response_synthesizer import LangChainResponseSynthesizer
from infrastructure.weather.open_meteo import OpenMeteoClient

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


class ServiceFactory:
    """Composition root: wires all dependencies together.

    Call initialize() once at startup, then create services/agents as needed.
    Every collaborator can be overridden through the constructor, which is
    how tests swap in stub clients and models.
    """

    def __init__(
        self,
        config: Settings,
        *,
        session_backend: Optional[FallbackSessionBackend] = None,
        weather_client: Optional[WeatherClientPort] = None,
        synthesizer: Optional[ResponseSynthesizerPort] = None,
        fallback: Optional[FallbackResponseProvider] = None,
    ):
        self._config = config

        if session_backend is None:
            primary = (
                RedisSessionBackend.from_url(
                    config.redis_url, connect_timeout=config.redis_connect_timeout,
                )
                if config.redis_enabled else None
            )
            session_backend = FallbackSessionBackend(primary, InMemorySessionBackend())
        self._session_backend = session_backend

        self._weather_client = weather_client or OpenMeteoClient(
            timeout=config.weather_http_timeout,
        )
        self._synthesizer = synthesizer or LangChainResponseSynthesizer(
            llm_factory_from_settings(config),
            history_limit=config.agent_history_limit,
        )
        self._fallback = fallback or RandomFallbackResponses()

        self._registry = ToolRegistry()
        self._orchestrator = ToolOrchestrator(self._registry, ParameterValidator())
        self._sessions = SessionService(
            self._session_backend, ttl_seconds=config.session_ttl_seconds,
        )
        self._initialized = False

    async def initialize(self) -> None:
        """One-time startup: check Redis and register tools.

        Must be called before creating agents.
        """
        logger.info("Initializing ServiceFactory...")

        await self._session_backend.check_connection()
        logger.info("Session backend: %s", self._session_backend.backend_name)

        self._registry.register_tool(WeatherTool(self._weather_client))
        self._registry.register_tool(CalendarTool())
        self._registry.register_tool(DatabaseTool())
        logger.info("Registered %d tools", self._registry.size())

        self._initialized = True
        logger.info("ServiceFactory ready")

    async def shutdown(self) -> None:
        await self._session_backend.close()
        logger.info("ServiceFactory shut down")

    # ------------------------------------------------------------------
    # Shared services
    # ------------------------------------------------------------------

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def orchestrator(self) -> ToolOrchestrator:
        return self._orchestrator

    @property
    def sessions(self) -> SessionService:
        return self._sessions

    @property
    def session_backend_name(self) -> str:
        return self._session_backend.backend_name

    # ------------------------------------------------------------------
    # Agent creation
    # ------------------------------------------------------------------

    def create_agent(self) -> ConversationAgent:
        """Create a fully configured ConversationAgent."""
        self._ensure_initialized()
        return ConversationAgent(
            intents=IntentEngine(),
            orchestrator=self._orchestrator,
            synthesizer=self._synthesizer,
            fallback=self._fallback,
            parallel_tools=self._config.agent_parallel_tools,
        )

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call await factory.initialize() first."
            )
