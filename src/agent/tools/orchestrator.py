"""
agent.tools.orchestrator - Validated, timed, failure-safe tool invocation.

execute() is the single entry point used by both the conversation agent and
the /mcp HTTP surface. It never raises: lookup, validation and execution
failures all come back as a ToolCallResult with success=False.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

from agent.tools.base import ToolDefinition
from agent.tools.registry import ToolRegistry
from agent.tools.validator import ParameterValidator
from domain.entities import utcnow
from domain.exceptions import ToolNotFoundError, ToolValidationError
from domain.models import ToolCallResult

logger = logging.getLogger(__name__)


class ToolOrchestrator:
    """Look up, validate, run and wrap tool calls."""

    def __init__(
        self,
        registry: ToolRegistry,
        validator: ParameterValidator | None = None,
    ):
        self._registry = registry
        self._validator = validator or ParameterValidator()

    async def execute(self, tool_name: str, params: Mapping[str, Any]) -> ToolCallResult:
        """Run a tool by name and return a uniform result envelope."""
        started = time.perf_counter()
        try:
            tool = self._registry.get(tool_name)
            if tool is None:
                raise ToolNotFoundError(tool_name)

            validation = self._validator.validate(tool, params)
            if not validation.is_valid:
                raise ToolValidationError(validation.errors)

            logger.info("Executing tool %s", tool_name)
            result = await tool.execute(dict(params))
        except Exception as exc:
            elapsed = _elapsed_ms(started)
            message = str(exc) or "Unknown error"
            logger.warning(
                "Tool %s failed after %.1fms: %s", tool_name, elapsed, message,
            )
            return ToolCallResult(
                success=False,
                tool_name=tool_name,
                timestamp=utcnow(),
                execution_time=elapsed,
                error=message,
            )

        elapsed = _elapsed_ms(started)
        logger.info("Tool %s completed in %.1fms", tool_name, elapsed)
        return ToolCallResult(
            success=True,
            tool_name=tool_name,
            timestamp=utcnow(),
            execution_time=elapsed,
            result=result,
        )

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def get_available_tools(self) -> list[ToolDefinition]:
        return self._registry.all()

    def get_tool_definition(self, tool_name: str) -> Optional[ToolDefinition]:
        return self._registry.get(tool_name)

    def get_tool_count(self) -> int:
        return self._registry.size()

    def get_tool_names(self) -> list[str]:
        return self._registry.names()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)
