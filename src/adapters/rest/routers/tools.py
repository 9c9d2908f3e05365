"""Tool orchestration endpoints under /mcp."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from factory import ServiceFactory
from adapters.rest.dependencies import get_factory
from adapters.rest.schemas import ToolCallOut, ToolOut, ToolStatusOut

router = APIRouter(prefix="/mcp", tags=["tools"])
logger = logging.getLogger(__name__)


@router.post(
    "/tools/{tool_name}/execute",
    response_model=ToolCallOut,
    response_model_exclude_none=True,
)
async def execute_tool(
    tool_name: str,
    params: Optional[dict[str, Any]] = Body(default=None),
    factory: ServiceFactory = Depends(get_factory),
):
    """Run a tool. Failures come back as success=false, never as an HTTP error."""
    logger.info("Executing tool via HTTP: %s", tool_name)
    result = await factory.orchestrator.execute(tool_name, params or {})
    return result.to_dict()


@router.get("/tools", response_model=list[ToolOut], response_model_exclude_none=True)
async def list_tools(factory: ServiceFactory = Depends(get_factory)):
    return [tool.to_dict() for tool in factory.orchestrator.get_available_tools()]


@router.get("/tools/{tool_name}", response_model=ToolOut, response_model_exclude_none=True)
async def get_tool(tool_name: str, factory: ServiceFactory = Depends(get_factory)):
    tool = factory.orchestrator.get_tool_definition(tool_name)
    if tool is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tool not found: {tool_name}",
        )
    return tool.to_dict()


@router.get("/status", response_model=ToolStatusOut)
async def tool_status(factory: ServiceFactory = Depends(get_factory)):
    return ToolStatusOut(
        tool_count=factory.orchestrator.get_tool_count(),
        available_tools=factory.orchestrator.get_tool_names(),
    )
