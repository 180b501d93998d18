"""WebSocket handler: streamed directions in, signals and state out."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from gravity_snake.server.session_manager import SessionManager
from gravity_snake.snake import Direction

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_manager(ws: WebSocket) -> SessionManager:
    return ws.app.state.session_manager


def _parse_direction(raw: str) -> Direction | None:
    """Extract a direction from ``{"direction": "up"}``; None if malformed."""
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(msg, dict):
        return None
    name = msg.get("direction")
    if not isinstance(name, str):
        return None
    try:
        return Direction.parse(name)
    except ValueError:
        return None


@ws_router.websocket("/sessions/{session_id}/play")
async def play(websocket: WebSocket, session_id: str) -> None:
    """Player WebSocket: send directions, receive a message per resolved turn."""
    manager = _get_manager(websocket)
    session = manager.get_session(session_id)
    if session is None:
        await websocket.close(code=4004, reason="Session not found.")
        return

    await websocket.accept()
    session.sockets.append(websocket)
    logger.info("Socket connected to session %s.", session_id)

    # Initial snapshot so the client can draw the level immediately.
    await websocket.send_text(
        json.dumps(
            {"outcome": None, "events": [], "state": session.pipeline.get_state()},
            separators=(",", ":"),
        ),
    )

    try:
        while True:
            raw = await websocket.receive_text()
            direction = _parse_direction(raw)
            if direction is None:
                continue
            manager.submit_move(session_id, direction)
    except WebSocketDisconnect:
        logger.info("Socket disconnected from session %s.", session_id)
    finally:
        if websocket in session.sockets:
            session.sockets.remove(websocket)
