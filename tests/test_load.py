"""Load test: many paced sessions resolving turns at the same time."""

from __future__ import annotations

import asyncio

import pytest

from gravity_snake.config import EngineConfig
from gravity_snake.server.models import SessionStatus
from gravity_snake.server.session_manager import SessionManager

FAST = EngineConfig(
    move_ms=5, fall_ms=5, block_fall_ms=5, min_push_ms=5,
    bounce_ms=5, loss_flash_ms=5, win_flash_ms=5, restart_delay_ms=5,
)


class TestConcurrentSessions:
    @pytest.mark.asyncio
    async def test_50_concurrent_sessions(self):
        """Spin up 50 paced sessions and play each to the portal."""
        manager = SessionManager(config=FAST)
        sessions = [
            manager.create_session(
                "first-steps", paced=True, client_ip=f"test-{i % 10}",
            )
            for i in range(50)
        ]

        async def play(session_id: str) -> list[str]:
            outcomes = []
            for _ in range(4):
                message = await manager.move(session_id, "right")
                outcomes.append(message["outcome"])
            return outcomes

        results = await asyncio.wait_for(
            asyncio.gather(*(play(s.session_id) for s in sessions)),
            timeout=10.0,
        )
        assert all(r == ["moved", "moved", "moved", "won"] for r in results)
        won = sum(1 for s in sessions if s.status is SessionStatus.WON)
        assert won == 50, f"Only {won}/50 sessions won"

    @pytest.mark.asyncio
    async def test_concurrent_losses_restart_independently(self):
        manager = SessionManager(config=FAST)
        sessions = [
            manager.create_session("mind-the-gap", paced=True, client_ip=f"ip-{i}")
            for i in range(20)
        ]

        async def fall(session_id: str) -> str:
            await manager.move(session_id, "right")
            message = await manager.move(session_id, "down")
            return message["outcome"]

        outcomes = await asyncio.gather(*(fall(s.session_id) for s in sessions))
        assert outcomes == ["lost"] * 20
        assert all(s.pipeline.restarts == 1 for s in sessions)
