"""
StreamSpawn CLI - Command line interface for the stream event bridge.

Usage:
    streamspawn run              Start the HTTP bridge
    streamspawn init-config      Write the default config.yml
    streamspawn test <event>     Send a sample event to a running server
    streamspawn reload           Ask a running server to reload its config
"""

import logging
import sys

import click
import httpx

from streamspawn import __version__
from streamspawn.config import ConfigError, ConfigStore, ensure_default_config, resolve_config_path
from streamspawn.engine.payloads import SAMPLE_PAYLOADS, resolve_kind_name

DEFAULT_URL = "http://127.0.0.1:8080"


def _fail(message: str) -> None:
    click.echo(click.style(f"⚠️ {message}", fg="red"))
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="streamspawn")
def main():
    """StreamSpawn - stream notifications to in-game mobs."""
    pass


@main.command()
@click.option("--config", "-c", "config_path", default=None, help="Path to config.yml")
@click.option("--host", "-h", default=None, help="Host to bind to (default: server.host)")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to (default: server.port)")
@click.option("--log-level", default="info", type=click.Choice(["debug", "info", "warning", "error"]))
def run(config_path: str | None, host: str | None, port: int | None, log_level: str):
    """Start the HTTP bridge and game loop."""
    import os

    import uvicorn

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = resolve_config_path(config_path)
    if ensure_default_config(path):
        click.echo(f"📝 Created default configuration at {path}")
        click.echo("Make sure to set 'target.streamer_username' to your Minecraft username!")
    try:
        store = ConfigStore.from_file(path)
    except ConfigError as e:
        _fail(str(e))

    # create_app() reads the same file through the env var
    os.environ["STREAMSPAWN_CONFIG"] = str(path)

    bind_host = host or store.get_str("server.host", "0.0.0.0")
    bind_port = port or store.get_int("server.port", 8080)
    click.echo(f"⏳ Starting StreamSpawn on {bind_host}:{bind_port}...")

    uvicorn.run(
        "streamspawn.main:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        log_level=log_level,
    )


@main.command("init-config")
@click.argument("path", default=None, required=False)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
def init_config(path: str | None, force: bool):
    """Write the default configuration to PATH (default: ./config.yml)."""
    target = resolve_config_path(path)
    if target.exists():
        if not force:
            _fail(f"{target} already exists. Use --force to overwrite.")
        target.unlink()
    ensure_default_config(target)
    click.echo(click.style(f"✅ Wrote {target}", fg="green"))


@main.command()
@click.argument("event_name")
@click.option("--url", default=DEFAULT_URL, show_default=True, help="Base URL of the running server")
def test(event_name: str, url: str):
    """Send a sample EVENT_NAME event (subscribe, gift, cheer, raid, follow)."""
    kind = resolve_kind_name(event_name)
    if kind is None:
        _fail(f"Unknown event type: {event_name}\nAvailable events: subscribe, gift, cheer, raid, follow")

    body = {"eventType": kind.value, "data": SAMPLE_PAYLOADS[kind]}
    try:
        response = httpx.post(f"{url.rstrip('/')}/event", json=body, timeout=10.0)
    except httpx.HTTPError as e:
        _fail(f"Could not reach {url}: {e}")

    if response.status_code != 200:
        _fail(f"Server rejected event ({response.status_code}): {response.text}")
    click.echo(click.style(f"✅ Triggered test {kind.value.replace('_', ' ')} event!", fg="green"))


@main.command()
@click.option("--url", default=DEFAULT_URL, show_default=True, help="Base URL of the running server")
def reload(url: str):
    """Reload the configuration of a running server."""
    try:
        response = httpx.post(f"{url.rstrip('/')}/api/admin/reload", timeout=10.0)
    except httpx.HTTPError as e:
        _fail(f"Could not reach {url}: {e}")

    if response.status_code != 200:
        _fail(f"Reload failed ({response.status_code}): {response.text}")
    click.echo(click.style("✅ Configuration reloaded!", fg="green"))


if __name__ == "__main__":
    main()
