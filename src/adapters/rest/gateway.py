"""
adapters.rest.gateway - WebSocket session binding and event handling.

Each socket is bound to one session id for its whole life. Sockets that
share a session id form a room: typing notifications are relayed inside
the room and send_to_session() broadcasts to all of it. A session outlives
its sockets; disconnecting only removes the socket from its room.

Wire frames in both directions are JSON objects {"event": ..., "data": ...}.
Each inbound frame is handled in its own task, so a ping or a history
request is answered while a slow agent turn on the same socket is running.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect

from agent.executor import ConversationAgent
from application.services.session_store import SessionService
from domain.entities import Message
from domain.exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)

CLOSE_NO_SESSION = 4000
CLOSE_IDLE = 4001

PROCESSING_ERROR_REPLY = "Sorry, I encountered an error processing your message."


@dataclass
class Connection:
    """One live socket bound to a session."""
    session_id: str
    websocket: WebSocket
    connection_id: str = field(default_factory=lambda: uuid4().hex)
    connected_at: float = field(default_factory=time.monotonic)
    last_activity: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_seconds(self) -> float:
        return time.monotonic() - self.last_activity


class ChatGateway:
    """Bind sockets to sessions and run the agent for each user message."""

    def __init__(
        self,
        sessions: SessionService,
        agent: ConversationAgent,
        idle_timeout_seconds: int = 300,
    ):
        self._sessions = sessions
        self._agent = agent
        self._idle_timeout = idle_timeout_seconds
        self._rooms: dict[str, dict[str, Connection]] = {}

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def serve(self, websocket: WebSocket, session_id: Optional[str]) -> None:
        """Run one socket from handshake to disconnect."""
        await websocket.accept()

        if not session_id:
            logger.error("Connection rejected: No session ID provided")
            await websocket.close(code=CLOSE_NO_SESSION, reason="No session ID provided")
            return

        conn = await self.connect(websocket, session_id)
        if conn is None:
            return

        pending: set[asyncio.Task] = set()
        try:
            while True:
                raw = await websocket.receive_text()
                conn.touch()
                task = asyncio.create_task(self._dispatch(conn, raw))
                pending.add(task)
                task.add_done_callback(pending.discard)
        except WebSocketDisconnect:
            pass
        finally:
            self.disconnect(conn)
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    async def _dispatch(self, conn: Connection, raw: str) -> None:
        try:
            await self.handle_frame(conn, raw)
        except Exception:
            logger.exception("Unhandled error for frame from %s", conn.connection_id)

    async def connect(self, websocket: WebSocket, session_id: str) -> Optional[Connection]:
        try:
            session = await self._sessions.get_or_create_session(session_id)
        except Exception:
            logger.exception("Connection error for session %s", session_id)
            await websocket.close(code=CLOSE_NO_SESSION, reason="Connection failed")
            return None

        conn = Connection(session_id=session_id, websocket=websocket)
        self._rooms.setdefault(session_id, {})[conn.connection_id] = conn
        logger.info("Client connected: %s (Session: %s)", conn.connection_id, session_id)

        await self._send(conn, "session_connected", {
            "sessionId": session_id,
            "conversationHistory": session.history_dicts(),
            "preferences": session.preferences.to_dict(),
        })
        return conn

    def disconnect(self, conn: Connection) -> None:
        room = self._rooms.get(conn.session_id)
        if room is None or room.pop(conn.connection_id, None) is None:
            return
        if not room:
            del self._rooms[conn.session_id]
        logger.info(
            "Client disconnected: %s (Session: %s)", conn.connection_id, conn.session_id,
        )

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    async def handle_frame(self, conn: Connection, raw: str) -> None:
        try:
            frame = json.loads(raw)
        except ValueError:
            frame = None
        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            logger.warning("Invalid frame from %s: %.200s", conn.connection_id, raw)
            await self._send(conn, "error", {"message": "Invalid message format"})
            return

        event = frame["event"]
        data = frame.get("data")

        if event in ("user_message", "message"):
            if event == "message" and isinstance(data, str):
                data = {"content": data}
            if not isinstance(data, dict) or not isinstance(data.get("content"), str) \
                    or not data["content"].strip():
                await self._send(conn, "error", {"message": "Invalid message format"})
                return
            metadata = data.get("metadata")
            await self.process_user_message(
                conn, data["content"], metadata if isinstance(metadata, dict) else {},
            )
        elif event in ("typing_start", "typing_stop"):
            await self._broadcast_others(
                conn, "user_typing", {"typing": event == "typing_start"},
            )
        elif event == "get_history":
            await self._send_history(conn)
        elif event == "ping":
            await self._send(conn, "pong", {})
        else:
            await self._send(conn, "error", {"message": f"Unknown event: {event}"})

    async def process_user_message(
        self, conn: Connection, content: str, metadata: dict[str, Any],
    ) -> None:
        session_id = conn.session_id
        logger.info("Processing message from session %s: %.200s", session_id, content)

        try:
            await self._sessions.add_message(
                session_id, Message(role="user", content=content, metadata=metadata),
            )
        except SessionNotFoundError:
            await self._send(conn, "error", {"message": "Session not found"})
            return

        await self._send(conn, "agent_thinking", {"thinking": True})
        try:
            session = await self._sessions.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)

            response = await self._agent.process_message(
                content, session.conversation_history, session.context, metadata,
            )

            await self._sessions.add_message(session_id, Message(
                role="assistant", content=response.content, metadata=response.metadata,
            ))
            if response.updated_context:
                await self._sessions.update_context(session_id, response.updated_context)

            await self._send(conn, "agent_response", {
                "type": "agent_response",
                "content": response.content,
                "metadata": response.metadata,
            })
        except Exception as e:
            logger.exception("Error processing message for session %s", session_id)
            await self._send(conn, "agent_response", {
                "type": "error",
                "content": PROCESSING_ERROR_REPLY,
                "metadata": {"error": str(e) or type(e).__name__},
            })
        finally:
            await self._send(conn, "agent_thinking", {"thinking": False})

    async def _send_history(self, conn: Connection) -> None:
        session = await self._sessions.get_session(conn.session_id)
        if session is None:
            await self._send(conn, "error", {"message": "Session not found"})
            return
        await self._send(conn, "conversation_history", {
            "history": session.history_dicts(),
            "sessionId": conn.session_id,
        })

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_to_session(self, session_id: str, event: str, data: Any) -> int:
        """Send an event to every socket bound to *session_id*. Returns the count."""
        room = list(self._rooms.get(session_id, {}).values())
        for conn in room:
            await self._send(conn, event, data)
        return len(room)

    async def _broadcast_others(self, sender: Connection, event: str, data: Any) -> None:
        for conn in list(self._rooms.get(sender.session_id, {}).values()):
            if conn.connection_id != sender.connection_id:
                await self._send(conn, event, data)

    async def _send(self, conn: Connection, event: str, data: Any) -> None:
        try:
            await conn.websocket.send_json({"event": event, "data": data})
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("Dropping %s for closed connection %s: %s", event, conn.connection_id, e)

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def active_connection_count(self) -> int:
        return sum(len(room) for room in self._rooms.values())

    def connections_for(self, session_id: str) -> list[Connection]:
        return list(self._rooms.get(session_id, {}).values())

    async def close_idle_connections(self) -> int:
        """Close sockets silent for longer than the idle timeout."""
        stale = [
            conn
            for room in self._rooms.values()
            for conn in room.values()
            if conn.idle_seconds() > self._idle_timeout
        ]
        for conn in stale:
            logger.info("Closing idle connection %s", conn.connection_id)
            try:
                await conn.websocket.close(code=CLOSE_IDLE, reason="Connection timeout")
            except RuntimeError as e:
                logger.debug("Idle connection %s already closed: %s", conn.connection_id, e)
            self.disconnect(conn)
        return len(stale)
