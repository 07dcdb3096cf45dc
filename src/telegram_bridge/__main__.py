"""Telegram bridge CLI."""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from telegram_bridge.app import BridgeApp
from telegram_bridge.config import load_settings
from telegram_bridge.errors import ConfigurationError
from telegram_bridge.logging_utils import configure_logging
from telegram_bridge.server import list_tools

app = typer.Typer(
    name="telegram-bridge",
    help="MCP server that asks a human for input over Telegram",
    add_completion=False,
)


async def _run_until_stopped(bridge_app: BridgeApp) -> None:
    await bridge_app.run()
    if bridge_app.server_detached:
        # asyncio.run would wait on the stdin reader thread forever; everything else is already closed.
        logger.info("app.exit.forced")
        sys.stdout.flush()
        sys.stderr.flush()
        os._exit(0)


def run_app(bridge_app: BridgeApp) -> None:
    """Run the app on a fresh event loop and return once it has stopped."""
    asyncio.run(_run_until_stopped(bridge_app))


@app.command()
def serve(
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="JSON config file with a telegram section"),
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", help="Override the log level")] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Seconds request_user_input waits for a reply"),
    ] = None,
) -> None:
    """Run the MCP server on stdio."""
    try:
        settings = load_settings(config, log_level=log_level, request_timeout_seconds=timeout)
    except ConfigurationError as exc:
        typer.echo(f"configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    configure_logging(settings.log_level, profile=settings.log_profile)
    run_app(BridgeApp(settings))


@app.command()
def tools() -> None:
    """Print the advertised tool listing as JSON."""
    listing = [tool.model_dump(mode="json", exclude_none=True) for tool in list_tools()]
    typer.echo(json.dumps(listing, indent=2))


if __name__ == "__main__":
    app()
