"""
agent.tools.registry - Tool registration and discovery.

Central registry that owns all available tool definitions. One instance is
built by the composition root at startup and handed to the orchestrator
and the HTTP surface; there is no module-level registry.
"""

from __future__ import annotations

import logging
from typing import Optional

from agent.tools.base import BaseTool, ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Mutable name -> ToolDefinition map."""

    def __init__(self):
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool by its name. Re-registering a name replaces it."""
        if tool.name in self._tools:
            logger.info("Replacing tool: %s", tool.name)
        else:
            logger.info("Registering tool: %s", tool.name)
        self._tools[tool.name] = tool

    def register_tool(self, tool: BaseTool) -> None:
        self.register(tool.to_definition())

    def unregister(self, name: str) -> None:
        logger.info("Unregistering tool: %s", name)
        self._tools.pop(name, None)

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name, or None if it is not registered."""
        return self._tools.get(name)

    def all(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def has(self, name: str) -> bool:
        return name in self._tools

    def size(self) -> int:
        return len(self._tools)

    def clear(self) -> None:
        logger.info("Clearing all tools from registry")
        self._tools.clear()

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
