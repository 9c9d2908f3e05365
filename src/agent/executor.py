"""
agent.executor - Per-turn conversation loop.

Recognize → Select → Execute (only when tools were selected) → Synthesize.

No component construction and no global state: the intent engine, tool
orchestrator, synthesizer and fallback provider are injected by factory.py.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from agent.fallback import TOOL_FAILURE_REPLY
from agent.intents import IntentEngine
from agent.tools.orchestrator import ToolOrchestrator
from domain.entities import Message, utcnow
from domain.exceptions import SynthesisError
from domain.models import AgentResponse, ToolResult, ToolSelection
from domain.ports import FallbackResponseProvider, ResponseSynthesizerPort

logger = logging.getLogger(__name__)

TOOLED_TEMPERATURE = 0.7
TOOLED_MAX_TOKENS = 500
CHAT_TEMPERATURE = 0.8
CHAT_MAX_TOKENS = 300


class ConversationAgent:
    """Runs one turn of the conversation.

    Constructed by factory.py with all dependencies injected.
    Stateless per call; session state flows in through the arguments.
    """

    def __init__(
        self,
        intents: IntentEngine,
        orchestrator: ToolOrchestrator,
        synthesizer: ResponseSynthesizerPort,
        fallback: FallbackResponseProvider,
        parallel_tools: bool = True,
    ):
        self._intents = intents
        self._orchestrator = orchestrator
        self._synthesizer = synthesizer
        self._fallback = fallback
        self._parallel_tools = parallel_tools

    async def process_message(
        self,
        content: str,
        history: Sequence[Message],
        context: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AgentResponse:
        """Process a user message and return the agent's reply.

        Args:
            content:  The user's message text.
            history:  The session's conversation so far. A trailing user
                      message equal to *content* is treated as this turn.
            context:  The session's free-form context map.
            metadata: Client-supplied metadata for this message.

        Returns:
            The reply with intents, tools used and timestamp in its metadata.
        """
        context = context or {}
        prior = _prior_turns(history, content)

        intents = self._intents.recognize_intents(content, prior)
        plan = self._intents.select_tools(intents, context)

        tool_results: list[ToolResult] = []
        if plan:
            tool_results = await self.execute_tool_plan(plan)
        tools_used = [r.tool_name for r in tool_results]

        reply, fallback_used = await self._synthesize(content, prior, tool_results)

        response_metadata: dict[str, Any] = {
            "intents": [i.to_dict() for i in intents],
            "toolsUsed": tools_used,
            "timestamp": utcnow().isoformat(),
        }
        if fallback_used:
            response_metadata["fallback"] = True

        logger.info(
            "Turn complete: intents=%s tools=%s fallback=%s",
            [i.intent for i in intents], tools_used, fallback_used,
        )
        return AgentResponse(
            content=reply.strip(),
            metadata=response_metadata,
            tools_used=tools_used,
        )

    async def execute_tool_plan(self, plan: Sequence[ToolSelection]) -> list[ToolResult]:
        """Run every selected tool; one failure never stops the others.

        Results come back in plan order whether the tools ran concurrently
        or one after another.
        """
        if self._parallel_tools:
            return list(await asyncio.gather(*(self._run_selection(s) for s in plan)))

        results = []
        for selection in plan:
            results.append(await self._run_selection(selection))
        return results

    async def _run_selection(self, selection: ToolSelection) -> ToolResult:
        logger.info("Executing tool: %s", selection.tool_name)
        outcome = await self._orchestrator.execute(selection.tool_name, selection.params)
        if not outcome.success:
            logger.error("Error executing tool %s: %s", selection.tool_name, outcome.error)
            return ToolResult(
                tool_name=selection.tool_name,
                confidence=selection.confidence,
                error=outcome.error,
            )
        return ToolResult(
            tool_name=selection.tool_name,
            confidence=selection.confidence,
            result=outcome.result,
        )

    async def _synthesize(
        self,
        content: str,
        history: list[Message],
        tool_results: list[ToolResult],
    ) -> tuple[str, bool]:
        if tool_results:
            temperature, max_tokens = TOOLED_TEMPERATURE, TOOLED_MAX_TOKENS
        else:
            temperature, max_tokens = CHAT_TEMPERATURE, CHAT_MAX_TOKENS

        try:
            reply = await self._synthesizer.synthesize(
                content, history, tool_results,
                temperature=temperature, max_tokens=max_tokens,
            )
        except SynthesisError as e:
            logger.warning("Falling back to canned reply: %s", e)
            if tool_results:
                return TOOL_FAILURE_REPLY, True
            return self._fallback.general_reply(content), True
        return reply, False


def _prior_turns(history: Sequence[Message], content: str) -> list[Message]:
    turns = list(history)
    if turns and turns[-1].role == "user" and turns[-1].content == content:
        return turns[:-1]
    return turns
