"""
Tests for settings loading and the WebSocket origin policy.
"""

import pytest

from shared.config.settings import Settings
from broadcast_gateway.components.core.constants import validate_websocket_origin


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("PORT", "WS_GATEWAY_PORT", "WS_GATEWAY_HOST", "ALLOWED_ORIGINS", "ENVIRONMENT", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, clean_env):
        s = Settings(_env_file=None)

        assert s.ws_gateway_host == "0.0.0.0"
        assert s.ws_gateway_port == 3000
        assert s.ws_max_message_size == 64 * 1024
        assert s.get_allowed_origins() == []

    def test_port_from_platform_variable(self, clean_env):
        clean_env.setenv("PORT", "8080")
        assert Settings(_env_file=None).ws_gateway_port == 8080

    def test_port_from_gateway_variable(self, clean_env):
        clean_env.setenv("WS_GATEWAY_PORT", "9001")
        assert Settings(_env_file=None).ws_gateway_port == 9001

    def test_invalid_port_rejected(self, clean_env):
        clean_env.setenv("PORT", "not-a-port")
        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_allowed_origins_parsing(self, clean_env):
        s = Settings(_env_file=None, allowed_origins=" https://a.example , https://b.example ,")
        assert s.get_allowed_origins() == ["https://a.example", "https://b.example"]

    def test_wildcard_origin_means_any(self, clean_env):
        s = Settings(_env_file=None, allowed_origins="*")
        assert s.get_allowed_origins() == []

    def test_production_validation(self, clean_env):
        s = Settings(_env_file=None, environment="production", debug=True)
        errors = s.validate_production_settings()

        assert any("DEBUG" in e for e in errors)
        assert any("ALLOWED_ORIGINS" in e for e in errors)

    def test_production_validation_passes_when_configured(self, clean_env):
        s = Settings(
            _env_file=None,
            environment="production",
            debug=False,
            allowed_origins="https://app.example",
        )
        assert s.validate_production_settings() == []


class TestOriginPolicy:
    """validate_websocket_origin decisions."""

    def test_any_origin_when_unconfigured(self, clean_env):
        s = Settings(_env_file=None)
        assert validate_websocket_origin("https://anything.example", s) is True
        assert validate_websocket_origin(None, s) is True

    def test_listed_origin_allowed(self, clean_env):
        s = Settings(_env_file=None, allowed_origins="https://app.example")
        assert validate_websocket_origin("https://app.example", s) is True

    def test_unlisted_origin_rejected(self, clean_env):
        s = Settings(_env_file=None, allowed_origins="https://app.example")
        assert validate_websocket_origin("https://evil.example", s) is False

    def test_missing_origin_allowed_only_in_development(self, clean_env):
        dev = Settings(_env_file=None, allowed_origins="https://app.example", environment="development")
        prod = Settings(_env_file=None, allowed_origins="https://app.example", environment="production")

        assert validate_websocket_origin(None, dev) is True
        assert validate_websocket_origin(None, prod) is False
