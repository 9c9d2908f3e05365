"""
Shared FastAPI dependencies.

- get_factory(): returns the initialized ServiceFactory (set at startup).
- get_gateway(): returns the ChatGateway bound to that factory.
"""

from __future__ import annotations

from factory import ServiceFactory
from adapters.rest.gateway import ChatGateway

# Module-level references set by app lifespan
_factory: ServiceFactory | None = None
_gateway: ChatGateway | None = None


def set_factory(factory: ServiceFactory | None) -> None:
    global _factory
    _factory = factory


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


def set_gateway(gateway: ChatGateway | None) -> None:
    global _gateway
    _gateway = gateway


def get_gateway() -> ChatGateway:
    if _gateway is None:
        raise RuntimeError("ChatGateway not initialized.")
    return _gateway
