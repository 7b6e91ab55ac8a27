"""CLI for probeadopt - local adoption endpoint for unadopted probes."""

from __future__ import annotations

import asyncio

import click

from probeadopt.config import (
    DEFAULT_HOST,
    DEFAULT_LIFETIME_MS,
    DEFAULT_PORT,
    AdoptionServerConfig,
    configure_logging,
)
from probeadopt.schemas import format_timestamp


@click.group()
@click.version_option(version="0.1.0", prog_name="probeadopt")
@click.option("--log-level", default="INFO", help="Logging level")
def main(log_level: str) -> None:
    """probeadopt - Let a claiming tool on the LAN discover this probe."""
    configure_logging(log_level.upper())


@main.command()
@click.option("--port", default=DEFAULT_PORT, help="Port to serve the token on")
@click.option("--host", default=DEFAULT_HOST, help="Host to bind to")
@click.option("--lifetime-ms", default=DEFAULT_LIFETIME_MS, help="How long the endpoint stays up")
def serve(port: int, host: str, lifetime_ms: int) -> None:
    """Serve a fresh adoption token until it expires.

    \b
    Example:
        probeadopt serve --port 50005 --lifetime-ms 60000
    """
    from probeadopt.adoption_server import AdoptionServer

    config = AdoptionServerConfig(port=port, lifetime_ms=lifetime_ms, host=host)

    async def _run() -> None:
        server = AdoptionServer(config)
        ticket = await server.start()
        click.echo(f"Token: {ticket.token}")
        click.echo(f"Expires at: {format_timestamp(ticket.expires_at)}")
        try:
            await asyncio.sleep(config.lifetime_seconds)
        finally:
            await server.stop()

    asyncio.run(_run())


@main.command()
@click.argument("url")
def connect(url: str) -> None:
    """Connect to the control API and react to adoption status events.

    Server port and lifetime come from ADOPTION_SERVER_* environment
    variables; GP_HOST_HW enables the local endpoint.

    \b
    Example:
        GP_HOST_HW=1 probeadopt connect wss://api.example.com/probes
    """
    from probeadopt.adoption_server import AdoptionServer
    from probeadopt.channel import SocketIOChannel
    from probeadopt.status_handler import AdoptionStatusHandler

    async def _run() -> None:
        channel = SocketIOChannel(url)
        server = AdoptionServer(AdoptionServerConfig.from_env())
        AdoptionStatusHandler(channel, server).register()
        try:
            await channel.connect()
            await channel.wait()
        finally:
            await server.stop()
            await channel.disconnect()

    asyncio.run(_run())


if __name__ == "__main__":
    main()
