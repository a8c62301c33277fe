"""
Pytest configuration and fixtures for gateway tests.
"""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.websockets import WebSocketState

from broadcast_gateway.components.connection.registry import ConnectionRegistry
from broadcast_gateway.components.metrics.collector import MetricsCollector
from broadcast_gateway.connection_manager import ConnectionManager
from broadcast_gateway.core.connection.router import BroadcastRouter


class RecordingTransport:
    """Transport double that records every delivered payload per connection."""

    def __init__(self):
        self.delivered: dict[str, list] = {}
        self.failing: set[str] = set()
        self.raising: set[str] = set()
        self.on_send = None

    async def send(self, connection_id, payload):
        if self.on_send is not None:
            self.on_send(connection_id)
        if connection_id in self.raising:
            raise ConnectionResetError("peer reset")
        if connection_id in self.failing:
            return False
        self.delivered.setdefault(connection_id, []).append(payload)
        return True

    def received(self, connection_id):
        return self.delivered.get(connection_id, [])


def make_websocket(origin=None, connected=True):
    """Mock WebSocket with the Starlette attributes the gateway reads."""
    ws = MagicMock()
    state = WebSocketState.CONNECTED if connected else WebSocketState.DISCONNECTED
    ws.client_state = state
    ws.application_state = state
    ws.accept = AsyncMock()
    ws.send_text = AsyncMock()
    ws.send_bytes = AsyncMock()
    ws.close = AsyncMock()
    ws.headers = {"origin": origin} if origin else {}
    ws.client = MagicMock(host="127.0.0.1", port=50000)
    return ws


def wait_until(predicate, timeout=2.0):
    """Poll predicate until it holds; the ASGI app runs in another thread under TestClient."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def websocket_factory():
    return make_websocket


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def router(registry, transport, metrics):
    return BroadcastRouter(registry=registry, transport=transport, metrics=metrics)


@pytest.fixture
def manager():
    return ConnectionManager(max_total_connections=10, batch_size=50)


@pytest.fixture
def poll():
    return wait_until
