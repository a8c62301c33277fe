"""
Broadcast Gateway CLI.

Command-line interface for running and inspecting the gateway.
"""

import sys
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from shared.config.logging import setup_logging, gateway_logger as logger
from shared.config.settings import settings
from broadcast_gateway import __version__

app = typer.Typer(
    name="broadcast-gateway",
    help="Realtime WebSocket broadcast gateway",
    add_completion=False,
)
console = Console()


class GatewayServer(uvicorn.Server):
    """uvicorn server that reports the bound port once listening."""

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            logger.info(f"Server listening on port {self.config.port}")


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Interface to bind (default: WS_GATEWAY_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port to bind (default: PORT / WS_GATEWAY_PORT)"),
):
    """Run the gateway until interrupted."""
    from broadcast_gateway.main import app as gateway_app

    setup_logging()
    config = uvicorn.Config(
        gateway_app,
        host=host or settings.ws_gateway_host,
        port=port if port is not None else settings.ws_gateway_port,
        log_config=None,
        ws_max_size=settings.ws_max_message_size,
    )
    server = GatewayServer(config)

    try:
        server.run()
    except (OSError, SystemExit) as e:
        logger.error("Failed to start server", port=config.port, error=str(e))
        raise typer.Exit(1)

    if not server.started:
        logger.error("Failed to start server", port=config.port)
        raise typer.Exit(1)


# =============================================================================
# Inspection Commands
# =============================================================================

@app.command()
def config():
    """Show effective configuration."""
    table = Table(title="Broadcast Gateway Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)

    errors = settings.validate_production_settings()
    for error in errors:
        console.print(f"[yellow]! {error}[/yellow]")


@app.command()
def health(
    url: str = typer.Option(
        f"http://localhost:{settings.ws_gateway_port}/ws/health",
        help="Health endpoint URL",
    ),
):
    """Query a running gateway's health endpoint."""
    import time

    import httpx

    try:
        start = time.time()
        response = httpx.get(url, timeout=5.0)
        elapsed = (time.time() - start) * 1000
    except httpx.HTTPError as e:
        console.print(f"[red]✗ {type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)

    if response.status_code != 200:
        console.print(f"[red]✗ Status {response.status_code}[/red]")
        raise typer.Exit(1)

    data = response.json()
    table = Table(title="Gateway Health")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key in ("status", "version", "environment", "total_connections", "max_connections"):
        table.add_row(key, str(data.get(key, "-")))
    table.add_row("response_time", f"{elapsed:.0f}ms")
    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Broadcast Gateway Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("Gateway", __version__)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
