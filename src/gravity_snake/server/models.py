"""Pydantic models for API request/response schemas."""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import BaseModel, Field


class SessionStatus(str, enum.Enum):
    """Lifecycle states for a play session."""

    ACTIVE = "active"
    WON = "won"


class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions.

    Either a built-in ``level_key`` or an inline ``level_map``; the map wins
    when both are given.
    """

    level_key: str = Field(default="first-steps", min_length=1, max_length=64)
    level_map: list[str] | None = Field(default=None, min_length=1, max_length=64)
    paced: bool = False


class MoveRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/move."""

    direction: Literal["up", "down", "left", "right"]


class SessionSummary(BaseModel):
    """Compact session info for list endpoints."""

    session_id: str
    level_key: str
    status: SessionStatus
    steps: int
    restarts: int


class MoveResponse(BaseModel):
    """Outcome of a move plus the state after it."""

    session_id: str
    outcome: str
    events: list[dict]
    state: dict

