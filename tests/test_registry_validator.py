import pytest

from agent.tools.base import ParameterDefinition, ToolDefinition
from agent.tools.registry import ToolRegistry
from agent.tools.validator import ParameterValidator, check_format, check_type


async def _noop(params):
    return params


def _tool(name="echo", **parameters) -> ToolDefinition:
    return ToolDefinition(name=name, description="test tool", execute=_noop, parameters=parameters)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_register_and_get():
    registry = ToolRegistry()
    registry.register(_tool("a"))
    registry.register(_tool("b"))

    assert registry.get("a").name == "a"
    assert registry.get("missing") is None
    assert sorted(registry.names()) == ["a", "b"]
    assert registry.size() == 2
    assert "a" in registry and registry.has("b")


def test_register_same_name_last_write_wins():
    registry = ToolRegistry()
    first = _tool("a")
    second = ToolDefinition(name="a", description="replacement", execute=_noop)
    registry.register(first)
    registry.register(second)

    assert registry.size() == 1
    assert registry.get("a").description == "replacement"


def test_unregister_and_clear():
    registry = ToolRegistry()
    registry.register(_tool("a"))
    registry.register(_tool("b"))

    registry.unregister("a")
    registry.unregister("never-registered")
    assert registry.names() == ["b"]

    registry.clear()
    assert len(registry) == 0
    assert registry.all() == []


def test_registries_are_independent():
    one, two = ToolRegistry(), ToolRegistry()
    one.register(_tool("a"))
    assert not two.has("a")


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------

def test_missing_required_parameter_is_named():
    tool = _tool(location=ParameterDefinition(type="string", required=True))
    result = ParameterValidator().validate(tool, {})

    assert not result.is_valid
    assert result.errors == ["Required parameter 'location' is missing"]


def test_missing_optional_parameter_is_fine():
    tool = _tool(units=ParameterDefinition(type="string"))
    assert ParameterValidator().validate(tool, {}).is_valid


def test_supplied_valid_parameter_has_no_error():
    tool = _tool(
        location=ParameterDefinition(type="string", required=True),
        units=ParameterDefinition(type="string", enum=["celsius", "fahrenheit"]),
    )
    result = ParameterValidator().validate(tool, {"location": "Paris", "units": "celsius"})
    assert result.is_valid
    assert result.errors == []


def test_type_mismatch():
    tool = _tool(count=ParameterDefinition(type="number", required=True))
    result = ParameterValidator().validate(tool, {"count": "ten"})
    assert result.errors == ["Parameter 'count' must be of type number"]


def test_enum_violation_lists_allowed_values():
    tool = _tool(units=ParameterDefinition(type="string", enum=["celsius", "fahrenheit"]))
    result = ParameterValidator().validate(tool, {"units": "kelvin"})
    assert result.errors == ["Parameter 'units' must be one of: celsius, fahrenheit"]


def test_format_violation_names_format():
    tool = _tool(start=ParameterDefinition(type="string", format="date-time", required=True))
    result = ParameterValidator().validate(tool, {"start": "not-a-date"})
    assert result.errors == ["Parameter 'start' must match format: date-time"]


def test_multiple_errors_are_collected():
    tool = _tool(
        a=ParameterDefinition(type="string", required=True),
        b=ParameterDefinition(type="number", required=True),
    )
    result = ParameterValidator().validate(tool, {"b": True})
    assert result.errors == [
        "Required parameter 'a' is missing",
        "Parameter 'b' must be of type number",
    ]


def test_undeclared_parameters_are_ignored():
    tool = _tool(a=ParameterDefinition(type="string"))
    assert ParameterValidator().validate(tool, {"a": "x", "extra": 42}).is_valid


@pytest.mark.parametrize("value, expected, ok", [
    ("x", "string", True),
    (3, "number", True),
    (2.5, "number", True),
    (True, "number", False),
    (False, "boolean", True),
    ({"k": 1}, "object", True),
    ([1], "object", False),
    (None, "object", False),
    ([1, 2], "array", True),
    ("[1]", "array", False),
])
def test_check_type(value, expected, ok):
    assert check_type(value, expected) is ok


@pytest.mark.parametrize("value, fmt, ok", [
    ("2025-07-15T09:00:00Z", "date-time", True),
    ("2025-07-15T09:00:00+02:00", "date-time", True),
    ("not-a-date", "date-time", False),
    ("2025-07-15", "date-time", False),
    ("2025-07-15", "date", True),
    ("2025-13-45", "date", False),
    ("15/07/2025", "date", False),
    ("user@example.com", "email", True),
    ("user@@example", "email", False),
    ("https://example.com/path", "url", True),
    ("example.com", "url", False),
    ("123e4567-E89B-12d3-a456-426614174000", "uuid", True),
    ("123e4567-e89b-12d3-a456", "uuid", False),
    ("anything", "hostname", True),
    (42, "email", False),
])
def test_check_format(value, fmt, ok):
    assert check_format(value, fmt) is ok
