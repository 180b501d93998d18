"""REST API route handlers for play sessions."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from gravity_snake.levels import builtin_keys
from gravity_snake.server.models import (
    CreateSessionRequest,
    MoveRequest,
    MoveResponse,
    SessionSummary,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])
levels_router = APIRouter(prefix="/levels", tags=["levels"])


def _get_manager(request: Request):
    return request.app.state.session_manager


@levels_router.get("")
async def list_levels() -> list[str]:
    """List built-in level keys."""
    return builtin_keys()


@router.post("", status_code=201)
async def create_session(
    body: CreateSessionRequest, request: Request,
) -> SessionSummary:
    """Start a new level attempt."""
    manager = _get_manager(request)
    client_ip = request.client.host if request.client else "unknown"
    try:
        session = manager.create_session(
            level_key=body.level_key,
            level_map=body.level_map,
            paced=body.paced,
            client_ip=client_ip,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return session.summary()


@router.get("")
async def list_sessions(request: Request) -> list[SessionSummary]:
    """List sessions still in play."""
    return _get_manager(request).list_sessions()


@router.get("/{session_id}")
async def get_session(session_id: str, request: Request) -> dict:
    """Get session metadata and the full engine state."""
    session = _get_manager(request).get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    result = session.summary().model_dump(mode="json")
    result["state"] = session.pipeline.get_state()
    return result


@router.post("/{session_id}/move")
async def move(
    session_id: str, body: MoveRequest, request: Request,
) -> MoveResponse:
    """Request one step in the given direction."""
    manager = _get_manager(request)
    try:
        message = await manager.move(session_id, body.direction)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return MoveResponse(session_id=session_id, **message)


@router.post("/{session_id}/restart")
async def restart(session_id: str, request: Request) -> dict:
    """Reset the level to its initial layout."""
    manager = _get_manager(request)
    try:
        await manager.restart(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"status": "restarted", "session_id": session_id}
