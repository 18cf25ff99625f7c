"""Integration tests for live connections and webhook fan-out."""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from test_helpers import FakeProvider, workout_event
from voicerelay.server.app import create_app

pytestmark = pytest.mark.integration


@pytest.fixture
def app(relay_config):
    return create_app(relay_config, FakeProvider())


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _handshake(ws) -> None:
    # A reply proves the server side has registered the connection
    ws.send_text("ping")
    assert ws.receive_text() == "pong"


class TestLiveConnections:
    """Test connection lifecycle on /ws."""

    def test_missing_user_id_rejected(self, client) -> None:
        """
        INVARIANT: A live connection without userId is refused
        BREAKS: Anonymous sockets pile up and can never receive events
        """
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws"):
                pass

        assert exc_info.value.code == 1008

    def test_blank_user_id_rejected(self, client) -> None:
        """Test whitespace userId is treated as missing."""
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws?userId=%20"):
                pass

        assert exc_info.value.code == 1008

    def test_connection_registered_and_removed(self, app, client) -> None:
        """Test the registry tracks the socket for its lifetime."""
        with client.websocket_connect("/ws?userId=A") as ws:
            _handshake(ws)
            assert "A" in app.state.registry
            assert client.get("/health").json()["connections"] == 1

        assert client.get("/health").json()["connections"] == 0

    def test_binary_frame_ignored(self, app, client) -> None:
        """Test binary frames neither close nor unregister the connection."""
        with client.websocket_connect("/ws?userId=A") as ws:
            ws.send_bytes(b"\x00\x01")
            _handshake(ws)
            assert "A" in app.state.registry

    def test_newer_connection_replaces_older(self, app, client) -> None:
        """
        INVARIANT: At most one live connection per user, the newest wins
        BREAKS: Events go to a stale browser tab
        """
        first = client.websocket_connect("/ws?userId=A").__enter__()
        _handshake(first)
        with client.websocket_connect("/ws?userId=A") as second:
            _handshake(second)

            with pytest.raises(WebSocketDisconnect) as exc_info:
                first.receive_text()
            assert exc_info.value.code == 1000

            # Tearing down the superseded socket keeps the newer mapping
            first.__exit__(None, None, None)
            assert "A" in app.state.registry

            response = client.post("/vital/webhook", json=workout_event("A"))
            assert response.json()["delivered"] is True
            assert second.receive_json()["user_id"] == "A"

        assert len(app.state.registry) == 0


class TestWebhookRelay:
    """Test webhook normalization and delivery."""

    def test_workout_delivered_to_live_connection(self, client) -> None:
        """
        INVARIANT: A recognized event reaches the addressed user's socket
        BREAKS: Live dashboards never update
        """
        with client.websocket_connect("/ws?userId=A") as ws:
            _handshake(ws)

            response = client.post("/vital/webhook", json=workout_event("A"))
            message = ws.receive_json()

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "event_type": "daily.data.workouts.created",
            "recognized": True,
            "user_id": "A",
            "delivered": True,
        }
        assert message == {
            "type": "workout",
            "event_type": "daily.data.workouts.created",
            "user_id": "A",
            "metrics": {
                "heart_rate": 142,
                "pace_sec_per_km": 300.0,
                "distance_km": 5.0,
                "elapsed_time_sec": 1620,
                "calories": 410,
                "start_time": "2026-10-18",
            },
        }

    def test_other_users_receive_nothing(self, client) -> None:
        """Test events addressed to B are not sent to A."""
        with client.websocket_connect("/ws?userId=A") as ws:
            _handshake(ws)

            response = client.post("/vital/webhook", json=workout_event("B"))

            assert response.json()["delivered"] is False
            _handshake(ws)

    def test_unregistered_user_acknowledged(self, client) -> None:
        """Test events for offline users still return ok."""
        response = client.post("/vital/webhook", json=workout_event("offline"))

        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert response.json()["delivered"] is False

    def test_unrecognized_event_acknowledged(self, client) -> None:
        """Test unknown event types are accepted without action."""
        response = client.post(
            "/vital/webhook",
            json={"event_type": "daily.data.sleep.created", "client_user_id": "A"},
        )

        assert response.status_code == 200
        assert response.json()["recognized"] is False

    def test_invalid_json_rejected(self, client) -> None:
        """Test a body that is not JSON returns 400."""
        response = client.post(
            "/vital/webhook",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
