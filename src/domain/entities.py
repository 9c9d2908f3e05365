"""
domain.entities - Persistence-aware types (have IDs, timestamps).

Session and Message are the only state that outlives a single turn. They are
plain dataclasses with no storage concerns; the session backends serialize
them through to_dict() / from_dict(), which use the camelCase field names the
extension client already speaks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Optional
from uuid import uuid4

Role = Literal["user", "assistant", "system"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return utcnow()


def new_message_id() -> str:
    return f"msg_{uuid4().hex[:12]}"


@dataclass
class Message:
    """One entry of a session's conversation history."""
    role: Role
    content: str
    id: str = field(default_factory=new_message_id)
    timestamp: datetime = field(default_factory=utcnow)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        return cls(
            id=data.get("id") or new_message_id(),
            role=data.get("role", "user"),
            content=data.get("content", ""),
            timestamp=_parse_ts(data.get("timestamp")),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class Preferences:
    """Per-session client preferences."""
    theme: Optional[str] = None
    language: Optional[str] = None
    ai_provider: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out = {
            "theme": self.theme,
            "language": self.language,
            "aiProvider": self.ai_provider,
        }
        return {k: v for k, v in out.items() if v is not None}

    def merged(self, updates: dict[str, Any]) -> Preferences:
        current = self.to_dict()
        current.update({k: v for k, v in updates.items() if v is not None})
        return Preferences.from_dict(current)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Preferences:
        return cls(
            theme=data.get("theme"),
            language=data.get("language"),
            ai_provider=data.get("aiProvider") or data.get("ai_provider"),
        )


@dataclass
class Session:
    """Server-side state for one logical conversation.

    conversation_history is append-only for the lifetime of the session and
    context is shallow-merged on update; only an explicit reset replaces it.
    """
    session_id: str
    user_id: Optional[str] = None
    conversation_history: list[Message] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)
    created_at: datetime = field(default_factory=utcnow)
    last_activity: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.last_activity = utcnow()

    def idle_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or utcnow()) - self.last_activity).total_seconds()

    def history_dicts(self) -> list[dict[str, Any]]:
        return [m.to_dict() for m in self.conversation_history]

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "userId": self.user_id,
            "conversationHistory": self.history_dicts(),
            "context": self.context,
            "preferences": self.preferences.to_dict(),
            "createdAt": self.created_at.isoformat(),
            "lastActivity": self.last_activity.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            session_id=data["sessionId"],
            user_id=data.get("userId"),
            conversation_history=[
                Message.from_dict(m) for m in data.get("conversationHistory") or []
            ],
            context=dict(data.get("context") or {}),
            preferences=Preferences.from_dict(data.get("preferences") or {}),
            created_at=_parse_ts(data.get("createdAt")),
            last_activity=_parse_ts(data.get("lastActivity")),
        )
