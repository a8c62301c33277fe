"""
WebSocket Transport.

Outbound side of the core: best-effort unicast of one payload to one
connection's channel. The transport owns the live WebSocket objects;
the registry only knows connection IDs.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Protocol, TYPE_CHECKING

from starlette.websockets import WebSocketState

from shared.config.logging import get_logger
from broadcast_gateway.components.core.constants import WSCloseCode, WSConstants

if TYPE_CHECKING:
    from fastapi import WebSocket

logger = get_logger(__name__)

Payload = str | bytes


class Transport(Protocol):
    """Outbound interface consumed by the broadcast router."""

    async def send(self, connection_id: str, payload: Payload) -> bool:
        """
        Deliver payload to one connection.

        Returns True on success, False on failure. May also raise;
        the router treats an exception as a failed delivery.
        """
        ...


def is_ws_connected(ws: "WebSocket") -> bool:
    """
    Check if WebSocket is in connected state before sending.

    Starlette WebSockets expose CONNECTING, CONNECTED and DISCONNECTED.
    Transitional states are not exposed, so connections may appear
    connected briefly after a disconnect was initiated.
    """
    return (
        ws.client_state == WebSocketState.CONNECTED
        and ws.application_state == WebSocketState.CONNECTED
    )


class WebSocketTransport:
    """
    Holds the WebSocket channel of every attached connection.

    Text payloads go out as text frames, bytes as binary frames.
    """

    def __init__(self, send_timeout: float = WSConstants.SEND_TIMEOUT) -> None:
        self._channels: dict[str, WebSocket] = {}
        self._lock = threading.Lock()
        self._send_timeout = send_timeout

    def attach(self, connection_id: str, websocket: "WebSocket") -> None:
        """Associate an accepted WebSocket with its connection ID."""
        with self._lock:
            self._channels[connection_id] = websocket

    def detach(self, connection_id: str) -> "WebSocket | None":
        """Forget the channel of a connection. Unknown IDs are ignored."""
        with self._lock:
            return self._channels.pop(connection_id, None)

    def get(self, connection_id: str) -> "WebSocket | None":
        """Get the channel of a connection, or None."""
        with self._lock:
            return self._channels.get(connection_id)

    @property
    def channel_count(self) -> int:
        """Number of attached channels."""
        with self._lock:
            return len(self._channels)

    async def send(self, connection_id: str, payload: Payload) -> bool:
        """
        Send to a single connection, returning success status.

        Never raises and never waits longer than send_timeout. A missing
        channel, a socket that is no longer connected, a send that does
        not finish in time and an error from the socket all yield False.
        """
        ws = self.get(connection_id)
        if ws is None or not is_ws_connected(ws):
            return False
        try:
            if isinstance(payload, (bytes, bytearray)):
                frame = ws.send_bytes(bytes(payload))
            else:
                frame = ws.send_text(payload)
            await asyncio.wait_for(frame, timeout=self._send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(
                "Send timed out",
                target=connection_id,
                timeout=self._send_timeout,
            )
            return False
        except Exception as e:
            logger.debug("Send failed", target=connection_id, error=str(e))
            return False

    async def close_all(
        self,
        code: int = WSCloseCode.GOING_AWAY,
        reason: str = "Server shutdown",
        timeout: float = WSConstants.SHUTDOWN_CLOSE_TIMEOUT,
    ) -> int:
        """
        Close every attached channel and detach it.

        Returns:
            Number of channels closed successfully.
        """
        with self._lock:
            channels = list(self._channels.values())
            self._channels.clear()

        async def close_one(ws: "WebSocket") -> bool:
            try:
                await ws.close(code=code, reason=reason)
                return True
            except Exception:
                return False

        if not channels:
            return 0

        try:
            results = await asyncio.wait_for(
                asyncio.gather(*[close_one(ws) for ws in channels], return_exceptions=True),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Timed out closing channels", total=len(channels))
            return 0
        return sum(1 for r in results if r is True)

    def get_stats(self) -> dict[str, int]:
        """Get transport statistics for monitoring."""
        return {"channels_attached": self.channel_count}
