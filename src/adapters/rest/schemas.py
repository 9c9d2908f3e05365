"""Pydantic models for REST API response validation."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Tools ---

class ParameterOut(BaseModel):
    type: str
    description: str = ""
    required: bool = False
    enum: Optional[list[str]] = None
    format: Optional[str] = None


class ToolOut(BaseModel):
    name: str
    description: str
    parameters: dict[str, ParameterOut]


class ToolCallMetadataOut(CamelModel):
    tool_name: str = Field(..., alias="toolName")
    timestamp: str


class ToolCallOut(CamelModel):
    success: bool
    execution_time: float = Field(..., alias="executionTime")
    metadata: ToolCallMetadataOut
    result: Any = None
    error: Optional[str] = None


class ToolStatusOut(CamelModel):
    tool_count: int = Field(..., alias="toolCount")
    available_tools: list[str] = Field(..., alias="availableTools")


# --- Health ---

class HealthOut(CamelModel):
    status: str
    version: str
    session_backend: str = Field(..., alias="sessionBackend")
    active_connections: int = Field(..., alias="activeConnections")
