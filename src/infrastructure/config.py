"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment or passed
explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the chat agent backend.

    No module-level globals. Construct via from_env() or pass explicitly
    in tests.
    """
    # Server
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # Session storage
    redis_url: str = "redis://localhost:6379/0"
    redis_enabled: bool = True
    redis_connect_timeout: float = 1.0
    session_ttl_seconds: int = 3600
    session_sweep_interval_seconds: int = 60

    # WebSocket gateway
    ws_idle_timeout_seconds: int = 300

    # ── Centralized LLM Provider ────────────────────────────────
    # Allowed: "openai", "groq", "ollama"
    llm_provider: str = "openai"

    # Model names; only the one matching llm_provider is used.
    llm_model_openai: str = "gpt-3.5-turbo"
    llm_model_groq: str = "llama-3.3-70b-versatile"
    llm_model_ollama: str = "llama3.2"

    # Connection details
    ollama_base_url: str = "http://localhost:11434/"
    groq_api_key: str = ""
    openai_api_key: str = ""

    # Agent
    agent_parallel_tools: bool = True
    # 0 means the full history is sent to the model
    agent_history_limit: int = 0

    # Tools
    weather_http_timeout: float = 10.0

    def __post_init__(self) -> None:
        for name in (
            "session_ttl_seconds",
            "session_sweep_interval_seconds",
            "ws_idle_timeout_seconds",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "openai":
            return self.llm_model_openai
        elif self.llm_provider == "groq":
            return self.llm_model_groq
        return self.llm_model_ollama

    @classmethod
    def from_env(cls) -> Settings:
        """Build Settings from the process environment (and .env, if present)."""
        from dotenv import load_dotenv
        load_dotenv()

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            port=int(os.getenv("PORT", "3001")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),

            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            redis_enabled=_env_bool("REDIS_ENABLED", True),
            redis_connect_timeout=float(os.getenv("REDIS_CONNECT_TIMEOUT", "1.0")),
            session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", "3600")),
            session_sweep_interval_seconds=int(
                os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", "60")
            ),
            ws_idle_timeout_seconds=int(os.getenv("WS_IDLE_TIMEOUT_SECONDS", "300")),

            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-3.5-turbo"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),

            agent_parallel_tools=_env_bool("AGENT_PARALLEL_TOOLS", True),
            agent_history_limit=int(os.getenv("AGENT_HISTORY_LIMIT", "0")),
            weather_http_timeout=float(os.getenv("WEATHER_HTTP_TIMEOUT", "10.0")),
        )
