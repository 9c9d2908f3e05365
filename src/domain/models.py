"""
domain.models - Value objects for the message-orchestration pipeline.

These are short-lived data containers with no business logic and no
dependencies on infrastructure (no LangChain, no Redis, no FastAPI).
Everything here is produced and consumed within a single turn.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Intent recognition / tool selection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IntentRecognition:
    """A classified purpose of a user message."""
    intent: str
    confidence: float
    entities: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "confidence": self.confidence,
            "entities": {k: to_jsonable(v) for k, v in self.entities.items()},
        }


@dataclass(frozen=True)
class ToolSelection:
    """A tool the agent decided to call, with parameters built from entities."""
    tool_name: str
    confidence: float
    params: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Tool execution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ToolCallResult:
    """Uniform envelope around one tool invocation.

    result holds the tool's raw return value on success; error holds a
    human-readable message on failure. execution_time is in milliseconds.
    """
    success: bool
    tool_name: str
    timestamp: datetime
    execution_time: float = 0.0
    result: Any = None
    error: Optional[str] = None

    @property
    def metadata(self) -> dict[str, Any]:
        return {"toolName": self.tool_name, "timestamp": self.timestamp.isoformat()}

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.success,
            "executionTime": self.execution_time,
            "metadata": self.metadata,
        }
        if self.success:
            out["result"] = to_jsonable(self.result)
        else:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one planned tool call, as seen by the agent."""
    tool_name: str
    confidence: float
    result: Any = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


# ---------------------------------------------------------------------------
# Agent output
# ---------------------------------------------------------------------------

@dataclass
class AgentResponse:
    """Reply produced by one turn of the conversation agent."""
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    tools_used: list[str] = field(default_factory=list)
    updated_context: Optional[dict[str, Any]] = None


def to_jsonable(value: Any) -> Any:
    """Convert tool payloads (pydantic models, datetimes) to JSON-ready values."""
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
