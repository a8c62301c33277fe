"""
Integration tests for the gateway application over real WebSocket sessions.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from shared.config.settings import settings
from broadcast_gateway.components.core.constants import WSCloseCode
from broadcast_gateway.connection_manager import ConnectionManager
from broadcast_gateway.main import create_app


@pytest.fixture
def gateway_manager():
    return ConnectionManager(max_total_connections=10)


@pytest.fixture
def client(gateway_manager, monkeypatch):
    monkeypatch.setattr(settings, "allowed_origins", "")
    app = create_app(gateway_manager)
    with TestClient(app) as test_client:
        yield test_client


class TestHealthEndpoints:
    """HTTP endpoints."""

    def test_health_check(self, client):
        response = client.get("/ws/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "broadcast-gateway"
        assert data["total_connections"] == 0

    def test_prometheus_metrics(self, client):
        response = client.get("/ws/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "broadcastgw_connections_total 0" in response.text


class TestBroadcast:
    """Messages relayed between WebSocket clients."""

    def test_message_relayed_to_other_client(self, client, gateway_manager, poll):
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            assert poll(lambda: gateway_manager.total_connections == 2)

            alice.send_text("hello")
            assert bob.receive_text() == "hello"

            bob.send_text("hi alice")
            assert alice.receive_text() == "hi alice"

    def test_sender_does_not_receive_own_message(self, client, gateway_manager, poll):
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            assert poll(lambda: gateway_manager.total_connections == 2)

            alice.send_text("first")
            bob.send_text("second")

            # If alice had received her own message it would arrive first
            assert alice.receive_text() == "second"
            assert bob.receive_text() == "first"

    def test_binary_frames_relayed_as_binary(self, client, gateway_manager, poll):
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            assert poll(lambda: gateway_manager.total_connections == 2)

            alice.send_bytes(b"\x00\x01\x02")
            assert bob.receive_bytes() == b"\x00\x01\x02"

    def test_order_preserved_per_sender(self, client, gateway_manager, poll):
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            assert poll(lambda: gateway_manager.total_connections == 2)

            for i in range(5):
                alice.send_text(f"m{i}")
            assert [bob.receive_text() for _ in range(5)] == ["m0", "m1", "m2", "m3", "m4"]

    def test_disconnect_unregisters(self, client, gateway_manager, poll):
        with client.websocket_connect("/ws") as alice:
            with client.websocket_connect("/ws"):
                assert poll(lambda: gateway_manager.total_connections == 2)
            assert poll(lambda: gateway_manager.total_connections == 1)

            alice.send_text("anyone?")
            assert poll(lambda: gateway_manager.metrics.get_snapshot()["messages_received"] == 1)

        assert poll(lambda: gateway_manager.total_connections == 0)
        snapshot = gateway_manager.metrics.get_snapshot()
        assert snapshot["connections_accepted"] == 2
        assert snapshot["connections_closed"] == 2


class TestRejections:
    """Connections and frames the gateway refuses."""

    def test_disallowed_origin_rejected(self, client, gateway_manager, monkeypatch):
        monkeypatch.setattr(settings, "allowed_origins", "https://app.example")

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws", headers={"origin": "https://evil.example"}):
                pass

        assert exc_info.value.code == WSCloseCode.FORBIDDEN
        assert gateway_manager.total_connections == 0
        assert gateway_manager.metrics.get_snapshot()["connections_rejected_origin"] == 1

    def test_allowed_origin_accepted(self, client, gateway_manager, monkeypatch, poll):
        monkeypatch.setattr(settings, "allowed_origins", "https://app.example")

        with client.websocket_connect("/ws", headers={"origin": "https://app.example"}):
            assert poll(lambda: gateway_manager.total_connections == 1)

    def test_oversized_message_closes_connection(self, client, gateway_manager, monkeypatch, poll):
        monkeypatch.setattr(settings, "ws_max_message_size", 8)

        with client.websocket_connect("/ws") as alice:
            assert poll(lambda: gateway_manager.total_connections == 1)
            alice.send_text("x" * 64)

            with pytest.raises(WebSocketDisconnect) as exc_info:
                alice.receive_text()

        assert exc_info.value.code == WSCloseCode.MESSAGE_TOO_BIG
        assert poll(lambda: gateway_manager.total_connections == 0)
        assert gateway_manager.metrics.get_snapshot()["messages_rejected_too_big"] == 1

    def test_capacity_limit(self, monkeypatch, poll):
        monkeypatch.setattr(settings, "allowed_origins", "")
        manager = ConnectionManager(max_total_connections=1)

        with TestClient(create_app(manager)) as client:
            with client.websocket_connect("/ws"):
                assert poll(lambda: manager.total_connections == 1)

                with pytest.raises(WebSocketDisconnect) as exc_info:
                    with client.websocket_connect("/ws"):
                        pass

        assert exc_info.value.code == WSCloseCode.SERVER_OVERLOADED
        assert manager.metrics.get_snapshot()["connections_rejected_limit"] == 1


class TestShutdown:
    """Lifespan teardown."""

    def test_shutdown_clears_connections(self, monkeypatch):
        monkeypatch.setattr(settings, "allowed_origins", "")
        manager = ConnectionManager()

        with TestClient(create_app(manager)):
            pass

        assert manager.is_shutting_down()
        assert manager.total_connections == 0
