"""
Tests for connection context and log sanitization.
"""

from unittest.mock import MagicMock

from broadcast_gateway.components.core.context import (
    WebSocketContext,
    preview_payload,
    sanitize_log_data,
)


class TestSanitization:
    """Client data is made safe before reaching logs."""

    def test_control_and_bidi_characters_removed(self):
        assert sanitize_log_data("ab\x00c\u202ed\ufeff") == "abcd"

    def test_quotes_and_backslashes_escaped(self):
        assert sanitize_log_data('a"b\\c') == 'a\\"b\\\\c'

    def test_truncation_marker(self):
        assert sanitize_log_data("x" * 20, max_length=5) == "xxxxx..."

    def test_binary_preview_shows_size_only(self):
        assert preview_payload(b"\x00\x01\x02") == "<3 bytes>"


class TestWebSocketContext:
    """Audit context."""

    def test_from_websocket(self, websocket_factory):
        ws = websocket_factory(origin="https://app.example")

        ctx = WebSocketContext.from_websocket(ws, "/ws")

        assert ctx.origin == "https://app.example"
        assert ctx.client == "127.0.0.1:50000"
        assert ctx.identifier == "peer:127.0.0.1:50000"

    def test_identifier_prefers_connection_id(self):
        ctx = WebSocketContext(endpoint="/ws", connection_id="0123456789abcdef")
        assert ctx.identifier == "conn:01234567"

    def test_audit_dict_omits_empty_fields(self):
        ctx = WebSocketContext(endpoint="/ws", connection_id="abc")
        assert ctx.to_audit_dict("CONNECT") == {
            "event_type": "CONNECT",
            "endpoint": "/ws",
            "connection_id": "abc",
        }

    def test_audit_uses_given_logger(self):
        log = MagicMock()
        ctx = WebSocketContext(endpoint="/ws", connection_id="abc")

        ctx.audit("DISCONNECT", logger_func=log, reason="1000")

        log.assert_called_once_with(
            event_type="DISCONNECT", endpoint="/ws", connection_id="abc", reason="1000"
        )
