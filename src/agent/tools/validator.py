"""
agent.tools.validator - Parameter validation against a tool's declared schema.

Checks presence, primitive type, enum membership and string format for
every declared parameter. Parameters the schema does not declare are
ignored.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Mapping
from urllib.parse import urlparse

from agent.tools.base import ToolDefinition
from domain.models import ValidationResult

logger = logging.getLogger(__name__)

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class ParameterValidator:
    """Validate a parameter map against a ToolDefinition."""

    def validate(self, tool: ToolDefinition, params: Mapping[str, Any]) -> ValidationResult:
        errors: list[str] = []

        for name, definition in tool.parameters.items():
            if name not in params:
                if definition.required:
                    errors.append(f"Required parameter '{name}' is missing")
                continue

            value = params[name]

            if not check_type(value, definition.type):
                errors.append(f"Parameter '{name}' must be of type {definition.type}")

            if definition.enum is not None and str(value) not in definition.enum:
                errors.append(
                    f"Parameter '{name}' must be one of: {', '.join(definition.enum)}"
                )

            if definition.format and not check_format(value, definition.format):
                errors.append(f"Parameter '{name}' must match format: {definition.format}")

        if errors:
            logger.warning(
                "Parameter validation failed for tool %s: %s", tool.name, errors,
            )
        return ValidationResult(is_valid=not errors, errors=errors)


def check_type(value: Any, expected: str) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        # bool is an int subclass but never a valid number here
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "object":
        return isinstance(value, Mapping)
    if expected == "array":
        return isinstance(value, (list, tuple))
    return True


def check_format(value: Any, fmt: str) -> bool:
    if fmt not in ("date-time", "date", "email", "url", "uuid"):
        return True
    if not isinstance(value, str):
        return False

    if fmt == "date-time":
        return "T" in value and _parses_as_datetime(value)
    if fmt == "date":
        return bool(_DATE_PREFIX_RE.match(value)) and _parses_as_datetime(value)
    if fmt == "email":
        return bool(_EMAIL_RE.match(value))
    if fmt == "url":
        try:
            parsed = urlparse(value)
        except ValueError:
            return False
        return bool(parsed.scheme and parsed.netloc)
    return bool(_UUID_RE.match(value))


def _parses_as_datetime(value: str) -> bool:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True
