"""
domain.exceptions - Custom exception hierarchy for the chat agent backend.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class ToolNotFoundError(DomainError):
    """Raised when a tool name is not present in the registry."""

    def __init__(self, tool_name: str):
        super().__init__(f"Tool not found: {tool_name}")
        self.tool_name = tool_name


class ToolValidationError(DomainError):
    """Raised when tool parameters fail schema validation."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class SessionNotFoundError(DomainError):
    """Raised when an operation targets a session that does not exist."""

    def __init__(self, session_id: str):
        super().__init__("Session not found")
        self.session_id = session_id


class UpstreamServiceError(DomainError):
    """Raised when an external API (geocoding, weather, LLM) fails."""


class LocationNotFoundError(UpstreamServiceError):
    """Raised when geocoding returns no match for a location."""


class SynthesisError(DomainError):
    """Raised when the generative model cannot produce a reply."""
