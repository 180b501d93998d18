"""WebSocket integration tests for streamed play."""

from __future__ import annotations

import json

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from gravity_snake.server.app import create_app
from gravity_snake.server.session_manager import SessionManager
from gravity_snake.server.websocket import _parse_direction
from gravity_snake.snake import Direction


@pytest.fixture()
def tc():
    """Starlette sync TestClient; REST calls and sockets share one loop."""
    application = create_app()
    application.state.session_manager = SessionManager()
    return TestClient(application)


def _create_session(tc, **body) -> str:
    resp = tc.post("/sessions", json=body)
    assert resp.status_code == 201
    return resp.json()["session_id"]


class TestParseDirection:
    def test_valid(self):
        assert _parse_direction('{"direction": "up"}') is Direction.UP
        assert _parse_direction('{"direction": "LEFT"}') is Direction.LEFT

    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2]",
        '{"dir": "up"}',
        '{"direction": 3}',
        '{"direction": "sideways"}',
    ])
    def test_malformed(self, raw):
        assert _parse_direction(raw) is None


class TestPlayWebSocket:
    def test_connect_and_receive_initial_state(self, tc):
        sid = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            msg = json.loads(ws.receive_text())
            assert msg["outcome"] is None
            assert msg["events"] == []
            assert msg["state"]["level_key"] == "first-steps"
            assert "world" in msg["state"]

    def test_direction_resolves_turn(self, tc):
        sid = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            ws.receive_text()
            ws.send_text(json.dumps({"direction": "right"}))
            msg = json.loads(ws.receive_text())
            assert msg["outcome"] == "moved"
            assert msg["events"] == [{"event": "step_completed", "payload": None}]
            assert msg["state"]["world"]["snake"]["body"][0] == [3, 2]

    def test_malformed_messages_ignored(self, tc):
        sid = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            ws.receive_text()
            ws.send_text("garbage")
            ws.send_text(json.dumps({"direction": "diagonal"}))
            ws.send_text(json.dumps({"direction": "down"}))
            msg = json.loads(ws.receive_text())
            assert msg["outcome"] == "rejected"

    def test_rest_moves_are_broadcast(self, tc):
        sid = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            ws.receive_text()
            resp = tc.post(f"/sessions/{sid}/move", json={"direction": "right"})
            assert resp.status_code == 200
            msg = json.loads(ws.receive_text())
            assert msg["outcome"] == "moved"

    def test_restart_is_broadcast(self, tc):
        sid = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            ws.receive_text()
            tc.post(f"/sessions/{sid}/restart")
            msg = json.loads(ws.receive_text())
            assert msg["outcome"] == "restarted"
            assert msg["events"] == [{"event": "level_restarted", "payload": 1}]

    def test_nonexistent_session_rejected(self, tc):
        with pytest.raises(WebSocketDisconnect), tc.websocket_connect(
            "/sessions/nonexistent/play",
        ):
            pass

    def test_socket_detached_on_disconnect(self, tc):
        sid = _create_session(tc)
        manager = tc.app.state.session_manager

        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            ws.receive_text()
            assert len(manager.get_session(sid).sockets) == 1
        # Broadcasting to a closed socket must not break the move.
        resp = tc.post(f"/sessions/{sid}/move", json={"direction": "right"})
        assert resp.status_code == 200
