"""
infrastructure.llm.response_synthesizer - Final reply generation.

Implements ResponseSynthesizerPort on top of any LangChain chat model. The
model is built per call through an LLMFactory so each branch of the agent
can use its own sampling parameters. Every failure (missing credentials,
network, provider error) is raised as SynthesisError for the agent to
recover from.
"""

from __future__ import annotations

import logging
from typing import Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from domain.entities import Message
from domain.exceptions import SynthesisError
from domain.models import ToolResult
from infrastructure.llm.llm_builder import LLMFactory
from infrastructure.llm.prompt import build_system_prompt, build_tool_context

logger = logging.getLogger(__name__)

EMPTY_COMPLETION_REPLY = "I apologize, but I couldn't generate a response."


def to_langchain_messages(history: Sequence[Message]) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for msg in history:
        if msg.role == "assistant":
            converted.append(AIMessage(content=msg.content))
        elif msg.role == "system":
            converted.append(SystemMessage(content=msg.content))
        else:
            converted.append(HumanMessage(content=msg.content))
    return converted


class LangChainResponseSynthesizer:
    """Send system prompt + history + user message to the chat model."""

    def __init__(self, llm_factory: LLMFactory, history_limit: int = 0):
        self._llm_factory = llm_factory
        self._history_limit = history_limit

    async def synthesize(
        self,
        user_message: str,
        history: list[Message],
        tool_results: list[ToolResult],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        tool_context = build_tool_context(tool_results)
        if self._history_limit > 0:
            history = history[-self._history_limit:]

        messages: list[BaseMessage] = [SystemMessage(content=build_system_prompt(tool_context))]
        messages.extend(to_langchain_messages(history))
        messages.append(HumanMessage(content=user_message))

        logger.info(
            "Requesting completion (%d history messages, %d tool results)",
            len(history), len(tool_results),
        )
        try:
            llm = self._llm_factory(temperature, max_tokens)
            completion = await llm.ainvoke(messages)
        except Exception as e:
            logger.error("Language model call failed: %s", e)
            raise SynthesisError("Failed to process AI request") from e

        content = completion.content if isinstance(completion.content, str) else ""
        return content or EMPTY_COMPLETION_REPLY
