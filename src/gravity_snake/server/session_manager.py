"""In-memory registry of play sessions and signal relay to sockets."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any

from starlette.websockets import WebSocket, WebSocketState

from gravity_snake.animation import Animator, PacedAnimator
from gravity_snake.config import EngineConfig
from gravity_snake.engine import GameEvent, MoveOutcome, StepPipeline
from gravity_snake.levels import get_level
from gravity_snake.parser import parse_level
from gravity_snake.server.models import SessionStatus, SessionSummary
from gravity_snake.session import LevelResult
from gravity_snake.snake import Direction

logger = logging.getLogger(__name__)

# Simple rate limit: max sessions created per IP within the window.
_RATE_LIMIT_WINDOW = 60.0  # seconds
_RATE_LIMIT_MAX = 30
_RATE_COMPACT_INTERVAL = 60.0  # seconds between stale-key sweeps
_MAX_FINISHED_SESSIONS = 100


@dataclass
class PlaySession:
    """A single-player level attempt and the sockets watching it."""

    session_id: str
    pipeline: StepPipeline
    sockets: list[WebSocket] = field(default_factory=list)
    pending_events: list[dict] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    _tasks: set[asyncio.Task] = field(default_factory=set, repr=False)

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.WON if self.pipeline.won else SessionStatus.ACTIVE

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            level_key=self.pipeline.level_key,
            status=self.status,
            steps=self.pipeline.session.steps,
            restarts=self.pipeline.restarts,
        )

    def record_event(self, event: GameEvent, payload: Any) -> None:
        if isinstance(payload, LevelResult):
            payload = asdict(payload)
        self.pending_events.append({"event": event.value, "payload": payload})

    def drain_events(self) -> list[dict]:
        events, self.pending_events = self.pending_events, []
        return events


class SessionManager:
    """Central registry managing all play sessions."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        max_finished_sessions: int = _MAX_FINISHED_SESSIONS,
    ) -> None:
        if max_finished_sessions < 0:
            raise ValueError("max_finished_sessions must be >= 0.")
        self.config = config or EngineConfig()
        self._sessions: dict[str, PlaySession] = {}
        self._rate_limits: dict[str, list[float]] = {}
        self._last_rate_compact: float = 0.0
        self._max_finished_sessions = max_finished_sessions

    def _check_rate_limit(self, client_ip: str) -> bool:
        """Return True if the client is within rate limits."""
        now = time.monotonic()
        timestamps = self._rate_limits.get(client_ip, [])
        timestamps = [t for t in timestamps if now - t < _RATE_LIMIT_WINDOW]
        if timestamps:
            self._rate_limits[client_ip] = timestamps
        else:
            self._rate_limits.pop(client_ip, None)
        self._compact_rate_limits(now)
        return len(timestamps) < _RATE_LIMIT_MAX

    def _compact_rate_limits(self, now: float) -> None:
        """Remove rate-limit entries whose timestamps have all expired."""
        if now - self._last_rate_compact < _RATE_COMPACT_INTERVAL:
            return
        self._last_rate_compact = now
        stale_ips = [
            ip for ip, ts in self._rate_limits.items()
            if all(now - t >= _RATE_LIMIT_WINDOW for t in ts)
        ]
        for ip in stale_ips:
            del self._rate_limits[ip]
        if stale_ips:
            logger.info("Compacted %d stale rate-limit entries.", len(stale_ips))

    def create_session(
        self,
        level_key: str = "first-steps",
        level_map: list[str] | None = None,
        paced: bool = False,
        client_ip: str = "unknown",
    ) -> PlaySession:
        """Start a new level attempt and return the session."""
        if not self._check_rate_limit(client_ip):
            raise ValueError("Rate limit exceeded. Try again later.")

        if level_map is not None:
            parsed = parse_level(level_map)
            key = "custom"
        else:
            parsed = get_level(level_key).parse()
            key = level_key

        animator: Animator = PacedAnimator(self.config) if paced else Animator()
        pipeline = StepPipeline(
            parsed, level_key=key, config=self.config, animator=animator,
        )
        session = PlaySession(session_id=uuid.uuid4().hex[:12], pipeline=pipeline)
        for event in GameEvent:
            pipeline.subscribe(event, session.record_event)

        self._sessions[session.session_id] = session
        self._rate_limits.setdefault(client_ip, []).append(time.monotonic())
        logger.info("Session %s created on level %s.", session.session_id, key)
        return session

    def get_session(self, session_id: str) -> PlaySession | None:
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> PlaySession:
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Session {session_id} not found.")
        return session

    def list_sessions(self) -> list[SessionSummary]:
        """Return summaries of sessions that are still being played."""
        return [
            s.summary() for s in self._sessions.values()
            if s.status == SessionStatus.ACTIVE
        ]

    async def move(
        self, session_id: str, direction: Direction | str,
    ) -> dict:
        """Run one turn and relay the resulting signals to sockets.

        Returns the message that was broadcast: outcome, drained events and
        the state after the turn. Dropped inputs are not broadcast.
        """
        session = self.require_session(session_id)
        outcome = await session.pipeline.request_move(direction)
        message = {
            "outcome": outcome.value,
            "events": [],
            "state": session.pipeline.get_state(),
        }
        if outcome is MoveOutcome.DROPPED:
            return message

        message["events"] = session.drain_events()
        if outcome is MoveOutcome.WON and session.finished_at is None:
            session.finished_at = time.monotonic()
            self._prune_finished_sessions()
        await self._broadcast(session, message)
        return message

    def submit_move(self, session_id: str, direction: Direction | str) -> None:
        """Fire-and-forget variant of :meth:`move` for streaming inputs.

        Inputs that arrive while a turn is resolving are dropped by the
        pipeline rather than waiting behind it.
        """
        session = self.require_session(session_id)
        task = asyncio.create_task(self.move(session_id, direction))
        session._tasks.add(task)
        task.add_done_callback(session._tasks.discard)

    async def restart(self, session_id: str) -> list[dict]:
        session = self.require_session(session_id)
        session.pipeline.restart()
        session.finished_at = None
        events = session.drain_events()
        await self._broadcast(session, {
            "outcome": "restarted",
            "events": events,
            "state": session.pipeline.get_state(),
        })
        return events

    def _prune_finished_sessions(self) -> None:
        """Bound retained won sessions to avoid unbounded registry growth."""
        finished = [
            s for s in self._sessions.values() if s.finished_at is not None
        ]
        overflow = len(finished) - self._max_finished_sessions
        if overflow <= 0:
            return
        finished.sort(key=lambda s: s.finished_at)
        for stale in finished[:overflow]:
            self._sessions.pop(stale.session_id, None)
        logger.info(
            "Pruned %d finished sessions (retaining up to %d).",
            overflow,
            self._max_finished_sessions,
        )

    async def _broadcast(self, session: PlaySession, message: dict) -> None:
        """Send a message to every socket attached to the session."""
        payload = json.dumps(message, separators=(",", ":"))
        dead: list[WebSocket] = []
        # Snapshot: disconnect handlers may mutate the list meanwhile.
        for ws in list(session.sockets):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                dead.append(ws)
        for ws in dead:
            if ws in session.sockets:
                session.sockets.remove(ws)

    async def cleanup(self) -> None:
        """Wait for in-flight moves and release all state."""
        tasks = [t for s in self._sessions.values() for t in s._tasks if not t.done()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for session in self._sessions.values():
            for ws in list(session.sockets):
                try:
                    if ws.client_state == WebSocketState.CONNECTED:
                        await ws.close(code=1000, reason="Server shutting down.")
                except Exception:
                    logger.warning(
                        "Failed closing socket in session %s.", session.session_id,
                    )
            session.sockets.clear()
        self._rate_limits.clear()
        logger.info("SessionManager cleanup complete.")
