"""
Tests for the command-line interface.
"""

import logging

import pytest
import uvicorn
from typer.testing import CliRunner

from broadcast_gateway import __version__
from broadcast_gateway.cli import GatewayServer, app

runner = CliRunner()


class TestServe:
    """serve command exit codes."""

    def test_bind_failure_exits_with_1(self, monkeypatch):
        def fail_to_bind(self, sockets=None):
            raise OSError(98, "Address already in use")

        monkeypatch.setattr(GatewayServer, "run", fail_to_bind)

        result = runner.invoke(app, ["serve", "--port", "3999"])

        assert result.exit_code == 1

    def test_server_that_never_started_exits_with_1(self, monkeypatch):
        monkeypatch.setattr(GatewayServer, "run", lambda self, sockets=None: None)

        result = runner.invoke(app, ["serve"])

        assert result.exit_code == 1

    def test_clean_run_exits_with_0(self, monkeypatch):
        captured = {}

        def run(self, sockets=None):
            captured["host"] = self.config.host
            captured["port"] = self.config.port
            self.started = True

        monkeypatch.setattr(GatewayServer, "run", run)

        result = runner.invoke(app, ["serve", "--host", "127.0.0.1", "--port", "4321"])

        assert result.exit_code == 0
        assert captured == {"host": "127.0.0.1", "port": 4321}


class TestGatewayServer:
    """Liveness log line."""

    @pytest.mark.asyncio
    async def test_logs_listening_port_after_startup(self, monkeypatch, caplog):
        async def fake_startup(self, sockets=None):
            self.started = True

        monkeypatch.setattr(uvicorn.Server, "startup", fake_startup)
        server = GatewayServer(uvicorn.Config(app=lambda scope: None, port=4567, log_config=None))

        with caplog.at_level(logging.INFO, logger="broadcast_gateway"):
            await server.startup()

        assert "Server listening on port 4567" in caplog.text

    @pytest.mark.asyncio
    async def test_no_log_when_startup_failed(self, monkeypatch, caplog):
        async def fake_startup(self, sockets=None):
            self.started = False

        monkeypatch.setattr(uvicorn.Server, "startup", fake_startup)
        server = GatewayServer(uvicorn.Config(app=lambda scope: None, port=4567, log_config=None))

        with caplog.at_level(logging.INFO, logger="broadcast_gateway"):
            await server.startup()

        assert "Server listening" not in caplog.text


class TestInspection:
    """config and version commands."""

    def test_config_lists_settings(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "ws_gateway_port" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
