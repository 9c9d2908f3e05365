"""
FastAPI application: WebSocket gateway and tool API for the chat agent.

Usage:
    python run_api.py

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 3001 --reload
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure src/ is on sys.path when invoked via uvicorn directly
_src_dir = Path(__file__).resolve().parent.parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from infrastructure.config import Settings
from factory import ServiceFactory, VERSION
from adapters.rest.dependencies import get_factory, get_gateway, set_factory, set_gateway
from adapters.rest.gateway import ChatGateway
from adapters.rest.routers import chat_ws, tools
from adapters.rest.schemas import HealthOut

logger = logging.getLogger(__name__)


async def run_periodically(
    name: str, interval: float, job: Callable[[], Awaitable[object]],
) -> None:
    """Run *job* every *interval* seconds until cancelled; failures are logged."""
    while True:
        await asyncio.sleep(interval)
        try:
            await job()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Periodic task %s failed", name)


def create_app(
    config: Optional[Settings] = None,
    factory: Optional[ServiceFactory] = None,
) -> FastAPI:
    """Build the application. Tests pass a pre-wired factory."""
    if config is None:
        config = factory.config if factory is not None else Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize ServiceFactory and gateway; start sweep tasks."""
        svc = factory or ServiceFactory(config)
        await svc.initialize()
        gateway = ChatGateway(
            sessions=svc.sessions,
            agent=svc.create_agent(),
            idle_timeout_seconds=svc.config.ws_idle_timeout_seconds,
        )
        set_factory(svc)
        set_gateway(gateway)

        tasks = [
            asyncio.create_task(run_periodically(
                "session-sweep",
                svc.config.session_sweep_interval_seconds,
                svc.sessions.cleanup_expired,
            )),
            asyncio.create_task(run_periodically(
                "idle-connection-sweep",
                # check every minute, or sooner for short timeouts
                min(60, svc.config.ws_idle_timeout_seconds),
                gateway.close_idle_connections,
            )),
        ]
        try:
            yield
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await svc.shutdown()
            set_gateway(None)
            set_factory(None)

    app = FastAPI(
        title="BrightSky Agent",
        version=VERSION,
        description="Chat assistant backend: WebSocket sessions, keyword intents and tools.",
        lifespan=lifespan,
    )

    # CORS_ORIGINS defaults to "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(chat_ws.router)
    app.include_router(tools.router)

    @app.get("/health", tags=["health"], response_model=HealthOut)
    async def health():
        svc = get_factory()
        return HealthOut(
            status="ok",
            version=VERSION,
            session_backend=svc.session_backend_name,
            active_connections=get_gateway().active_connection_count(),
        )

    return app


app = create_app()
