"""
agent.tools.base - Tool definition types and the base tool interface.

A ToolDefinition is what the registry stores and the validator inspects:
a name, a description, a flat parameter schema and an async callable.
Concrete tools subclass BaseTool, declare their parameter schema once and
parse incoming parameter maps into a typed Pydantic input model before
doing any work.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional

from pydantic import BaseModel

ParamType = Literal["string", "number", "boolean", "object", "array"]
ToolCallable = Callable[[Mapping[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class ParameterDefinition:
    """Schema of a single tool parameter.

    format is only checked for string-ish values and is one of
    "date-time", "date", "email", "url", "uuid".
    """
    type: ParamType
    description: str = ""
    required: bool = False
    enum: Optional[list[str]] = None
    format: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type,
            "description": self.description,
            "required": self.required,
        }
        if self.enum is not None:
            out["enum"] = list(self.enum)
        if self.format is not None:
            out["format"] = self.format
        return out


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described callable unit."""
    name: str
    description: str
    execute: ToolCallable
    parameters: dict[str, ParameterDefinition] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {k: v.to_dict() for k, v in self.parameters.items()},
        }


class BaseTool(ABC):
    """Abstract base for all agent tools."""

    name: str
    description: str
    parameters: dict[str, ParameterDefinition]

    @abstractmethod
    def get_schema(self) -> type[BaseModel]:
        """Return the Pydantic model this tool parses its parameters into."""
        ...

    @abstractmethod
    async def run(self, args: BaseModel) -> Any:
        """Do the actual work with already-parsed arguments."""
        ...

    async def execute(self, params: Mapping[str, Any]) -> Any:
        args = self.get_schema().model_validate(dict(params))
        return await self.run(args)

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=dict(self.parameters),
            execute=self.execute,
        )
