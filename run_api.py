"""
Run the BrightSky chat agent server (WebSocket gateway + /mcp tool API).

Usage:
    python run_api.py

Environment variables (all optional):
    PORT                    Listen port (default: 3001)
    CORS_ORIGINS            Comma-separated allowed origins (default: *)
    REDIS_URL               Session cache (default: redis://localhost:6379/0)
    REDIS_ENABLED           "false" to keep sessions in memory only
    SESSION_TTL_SECONDS     Idle session lifetime (default: 3600)
    WS_IDLE_TIMEOUT_SECONDS Close silent sockets after this long (default: 300)
    LLM_PROVIDER            "openai", "groq", or "ollama" (default: openai)
    OPENAI_API_KEY          Required when LLM_PROVIDER=openai
    GROQ_API_KEY            Required when LLM_PROVIDER=groq
    OLLAMA_BASE_URL         Ollama server URL (default: http://localhost:11434/)
    AGENT_PARALLEL_TOOLS    "false" to run selected tools one after another
    LOG_LEVEL               Root log level (default: INFO)
"""

import logging
import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

from infrastructure.config import Settings

if __name__ == "__main__":
    config = Settings.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=config.port,
        reload=True,
    )
