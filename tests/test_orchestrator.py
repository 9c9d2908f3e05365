import asyncio

from agent.tools.base import ParameterDefinition, ToolDefinition
from agent.tools.orchestrator import ToolOrchestrator
from agent.tools.registry import ToolRegistry


async def _echo(params):
    return {"echo": params["text"]}


async def _boom(params):
    raise RuntimeError("upstream exploded")


async def _silent_failure(params):
    raise ValueError()


def _orchestrator() -> ToolOrchestrator:
    registry = ToolRegistry()
    registry.register(ToolDefinition(
        name="echo",
        description="Echo text back",
        execute=_echo,
        parameters={"text": ParameterDefinition(type="string", required=True)},
    ))
    registry.register(ToolDefinition(name="boom", description="Always fails", execute=_boom))
    registry.register(ToolDefinition(name="silent", description="Fails quietly", execute=_silent_failure))
    return ToolOrchestrator(registry)


def test_unknown_tool_returns_failure_instead_of_raising():
    result = asyncio.run(_orchestrator().execute("nope", {}))

    assert result.success is False
    assert result.error == "Tool not found: nope"
    assert result.metadata["toolName"] == "nope"
    assert result.execution_time >= 0


def test_validation_errors_are_joined():
    result = asyncio.run(_orchestrator().execute("echo", {"text": 5}))
    assert result.success is False
    assert result.error == "Parameter 'text' must be of type string"

    result = asyncio.run(_orchestrator().execute("echo", {}))
    assert result.error == "Required parameter 'text' is missing"


def test_success_wraps_raw_result():
    result = asyncio.run(_orchestrator().execute("echo", {"text": "hi"}))

    assert result.success is True
    assert result.result == {"echo": "hi"}
    assert result.error is None
    body = result.to_dict()
    assert body["success"] is True
    assert body["result"] == {"echo": "hi"}
    assert body["metadata"]["toolName"] == "echo"
    assert "executionTime" in body
    assert "error" not in body


def test_tool_exception_becomes_error_message():
    result = asyncio.run(_orchestrator().execute("boom", {}))
    assert result.success is False
    assert result.error == "upstream exploded"
    assert "result" not in result.to_dict()


def test_exception_without_message_reports_unknown_error():
    result = asyncio.run(_orchestrator().execute("silent", {}))
    assert result.error == "Unknown error"


def test_discovery_helpers():
    orchestrator = _orchestrator()
    assert orchestrator.get_tool_count() == 3
    assert set(orchestrator.get_tool_names()) == {"echo", "boom", "silent"}
    assert orchestrator.get_tool_definition("echo").description == "Echo text back"
    assert orchestrator.get_tool_definition("missing") is None
    assert len(orchestrator.get_available_tools()) == 3
