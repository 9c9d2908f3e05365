"""WebSocket endpoint for the chat agent."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket

from adapters.rest.dependencies import get_gateway

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def websocket_chat(
    ws: WebSocket,
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
):
    """
    WebSocket chat endpoint.

    The session is chosen by query parameter: /ws?sessionId=<id>
    (browsers cannot set headers on the WebSocket handshake.)

    Protocol:
      - Frames are JSON objects {"event": <name>, "data": <payload>}
      - Client events: user_message, message, typing_start, typing_stop,
        get_history, ping
      - Server events: session_connected, agent_thinking, agent_response,
        conversation_history, user_typing, error, pong
      - Missing sessionId: close with code 4000
      - Idle for longer than WS_IDLE_TIMEOUT_SECONDS: close with code 4001
    """
    await get_gateway().serve(ws, session_id)
