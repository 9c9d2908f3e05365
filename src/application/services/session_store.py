"""
application.services.session_store - Session lifecycle on top of a SessionBackend.

Every write resets the idle TTL. Reads through get_session() count as
activity: last_activity is refreshed and persisted. Read-modify-write
cycles are not atomic, so two concurrent turns on the same session can
lose an update.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from domain.entities import Message, Session, utcnow
from domain.exceptions import SessionNotFoundError
from domain.ports import SessionBackend

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


class SessionService:
    """Create, read and mutate sessions."""

    def __init__(self, backend: SessionBackend, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self._backend = backend
        self._ttl = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    async def create_session(
        self, session_id: str, initial: Optional[dict[str, Any]] = None,
    ) -> Session:
        """Create a session with defaults, overridden by *initial* (wire field names)."""
        now = utcnow()
        data = Session(session_id=session_id, created_at=now, last_activity=now).to_dict()
        data.update(initial or {})
        data["sessionId"] = session_id

        session = Session.from_dict(data)
        await self._backend.store(session, self._ttl)
        logger.info("Created session %s", session_id)
        return session

    async def get_session(self, session_id: str) -> Optional[Session]:
        session = await self._backend.load(session_id)
        if session is None:
            return None
        session.touch()
        await self._backend.store(session, self._ttl)
        return session

    async def get_or_create_session(self, session_id: str) -> Session:
        session = await self.get_session(session_id)
        if session is None:
            session = await self.create_session(session_id)
        return session

    async def save_session(self, session_id: str, session: Session) -> None:
        if session.session_id != session_id:
            session.session_id = session_id
        await self._backend.store(session, self._ttl)

    async def add_message(self, session_id: str, message: Message) -> Session:
        """Append *message* to the history.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        session = await self._backend.load(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.conversation_history.append(message)
        session.touch()
        await self._backend.store(session, self._ttl)
        return session

    async def update_session(
        self, session_id: str, partial: dict[str, Any],
    ) -> Optional[Session]:
        """Shallow-merge *partial* (wire field names) into the session."""
        session = await self._backend.load(session_id)
        if session is None:
            return None
        data = session.to_dict()
        data.update(partial)
        data["sessionId"] = session_id
        updated = Session.from_dict(data)
        updated.touch()
        await self._backend.store(updated, self._ttl)
        return updated

    async def update_context(
        self, session_id: str, partial: dict[str, Any],
    ) -> Optional[Session]:
        session = await self._backend.load(session_id)
        if session is None:
            return None
        session.context.update(partial)
        session.touch()
        await self._backend.store(session, self._ttl)
        return session

    async def update_preferences(
        self, session_id: str, partial: dict[str, Any],
    ) -> Optional[Session]:
        session = await self._backend.load(session_id)
        if session is None:
            return None
        session.preferences = session.preferences.merged(partial)
        session.touch()
        await self._backend.store(session, self._ttl)
        return session

    async def reset_context(self, session_id: str) -> Optional[Session]:
        session = await self._backend.load(session_id)
        if session is None:
            return None
        session.context = {}
        await self._backend.store(session, self._ttl)
        return session

    async def get_messages(
        self, session_id: str, limit: Optional[int] = None,
    ) -> list[Message]:
        """Return the history, or only the last *limit* messages."""
        session = await self._backend.load(session_id)
        if session is None:
            return []
        history = session.conversation_history
        if limit is not None and limit > 0:
            return history[-limit:]
        return list(history)

    async def delete_session(self, session_id: str) -> None:
        await self._backend.delete(session_id)
        logger.info("Deleted session %s", session_id)

    async def extend_session(
        self, session_id: str, ttl_seconds: Optional[int] = None,
    ) -> None:
        await self._backend.expire(session_id, ttl_seconds or self._ttl)

    async def list_session_ids(self) -> list[str]:
        return await self._backend.keys()

    async def cleanup_expired(self) -> int:
        """Drop sessions idle for longer than the TTL.

        Only the in-memory tier needs this; Redis expires keys on its own.
        """
        sweep = getattr(self._backend, "sweep_expired", None)
        if sweep is None:
            return 0
        return sweep()
