"""
Run the BrightSky chat agent CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    serve      Run the HTTP/WebSocket server
    chat       Interactive chat session against a local session
    ask        One-shot question
    tools      List registered tools and their parameters
    call-tool  Run one tool with JSON parameters

Examples:
    python run_cli.py ask "What's the weather in Tokyo?"
    python run_cli.py chat --session my-session
    python run_cli.py call-tool calendar --params '{"startDate": "2025-07-15T00:00:00Z", "endDate": "2025-07-22T00:00:00Z"}'

Environment variables (all optional):
    LLM_PROVIDER        "openai", "groq", or "ollama" (default: openai)
    LLM_MODEL_OPENAI    Model name when LLM_PROVIDER=openai (default: gpt-3.5-turbo)
    LLM_MODEL_GROQ      Model name when LLM_PROVIDER=groq (default: llama-3.3-70b-versatile)
    LLM_MODEL_OLLAMA    Model name when LLM_PROVIDER=ollama (default: llama3.2)
    OPENAI_API_KEY      Required when LLM_PROVIDER=openai
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    REDIS_URL           Session cache (falls back to memory when unreachable)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
