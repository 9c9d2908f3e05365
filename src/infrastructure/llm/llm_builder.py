"""
infrastructure.llm.llm_builder - Chat model construction per provider.

The response synthesizer asks for a fresh chat model on every call, with
the sampling parameters of the branch it is in (tooled or plain chat).
Provider credentials and model names come from Settings and are bound
once by llm_factory_from_settings().

Providers:
    openai  langchain_openai.ChatOpenAI
    groq    langchain_groq.ChatGroq
    ollama  langchain_ollama.ChatOllama
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)

# (temperature, max_tokens) -> chat model
LLMFactory = Callable[[float, int], BaseChatModel]

GROQ_DEFAULT_MAX_TOKENS = 512


def _openai(model: str, temperature: float, max_tokens: Optional[int], *,
            openai_api_key: str, **_: Any) -> BaseChatModel:
    from langchain_openai import ChatOpenAI

    if not openai_api_key:
        raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER='openai'")
    options: dict[str, Any] = {}
    if max_tokens is not None:
        options["max_tokens"] = max_tokens
    return ChatOpenAI(
        model=model, temperature=temperature, openai_api_key=openai_api_key, **options,
    )


def _groq(model: str, temperature: float, max_tokens: Optional[int], *,
          groq_api_key: str, **_: Any) -> BaseChatModel:
    from langchain_groq import ChatGroq

    if not groq_api_key:
        raise ValueError("GROQ_API_KEY is required when LLM_PROVIDER='groq'")
    return ChatGroq(
        model=model,
        temperature=temperature,
        groq_api_key=groq_api_key,
        max_tokens=max_tokens if max_tokens is not None else GROQ_DEFAULT_MAX_TOKENS,
    )


def _ollama(model: str, temperature: float, max_tokens: Optional[int], *,
            ollama_base_url: str, **_: Any) -> BaseChatModel:
    from langchain_ollama import ChatOllama

    options: dict[str, Any] = {}
    if max_tokens is not None:
        options["num_predict"] = max_tokens
    return ChatOllama(
        model=model, temperature=temperature, base_url=ollama_base_url, **options,
    )


_PROVIDERS: dict[str, Callable[..., BaseChatModel]] = {
    "openai": _openai,
    "groq": _groq,
    "ollama": _ollama,
}


def build_llm(
    *,
    provider: str,
    model: str,
    temperature: float = 0,
    ollama_base_url: str = "http://localhost:11434/",
    openai_api_key: str = "",
    groq_api_key: str = "",
    max_tokens: Optional[int] = None,
) -> BaseChatModel:
    """Build a chat model for *provider*.

    Raises:
        ValueError: If the provider is unknown or its API key is missing.
    """
    key = provider.lower().strip()
    builder = _PROVIDERS.get(key)
    if builder is None:
        raise ValueError(
            f"Unsupported LLM_PROVIDER: '{provider}'. "
            f"Must be one of: {', '.join(_PROVIDERS)}."
        )

    logger.debug(
        "Building %s chat model (model=%s, temperature=%s, max_tokens=%s)",
        key, model, temperature, max_tokens,
    )
    return builder(
        model, temperature, max_tokens,
        ollama_base_url=ollama_base_url,
        openai_api_key=openai_api_key,
        groq_api_key=groq_api_key,
    )


def llm_factory_from_settings(settings: Any) -> LLMFactory:
    """Bind provider settings so callers only choose sampling parameters."""

    def factory(temperature: float, max_tokens: int) -> BaseChatModel:
        return build_llm(
            provider=settings.llm_provider,
            model=settings.active_llm_model,
            temperature=temperature,
            max_tokens=max_tokens,
            ollama_base_url=settings.ollama_base_url,
            openai_api_key=settings.openai_api_key,
            groq_api_key=settings.groq_api_key,
        )

    return factory
