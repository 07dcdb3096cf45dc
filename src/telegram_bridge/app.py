"""Application wiring and process lifecycle."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Awaitable, Callable

from loguru import logger
from mcp.server.lowlevel import Server

from telegram_bridge.access import AccessFilter
from telegram_bridge.bridge import CorrelationBridge
from telegram_bridge.channels import BaseChannel, InboundBus, TelegramChannel, TelegramConfig
from telegram_bridge.config import Settings
from telegram_bridge.server import build_server, serve_stdio
from telegram_bridge.tools import TOOLS, ToolDispatcher

ServeFn = Callable[[Server], Awaitable[None]]

# Time given to cancelled tool calls to write their results before the server stops.
_DRAIN_GRACE_SECONDS = 0.2
_SERVER_STOP_TIMEOUT_SECONDS = 1.0


class BridgeApp:
    """Owns the channel, the bridge and the MCP server for one process."""

    def __init__(
        self,
        settings: Settings,
        *,
        channel: BaseChannel | None = None,
        bus: InboundBus | None = None,
        serve: ServeFn = serve_stdio,
    ) -> None:
        self.settings = settings
        self.bus = bus or InboundBus()
        self.access = AccessFilter(settings.allowed_chat_ids or ())
        self.channel = channel or TelegramChannel(self.bus, TelegramConfig(token=settings.bot_token))
        self.bridge = CorrelationBridge(
            self.channel,
            self.access,
            request_timeout=settings.request_timeout_seconds,
            echo_template=settings.echo_template,
        )
        self.dispatcher = ToolDispatcher(self.bridge)
        self.server = build_server(self.dispatcher, name=settings.server_name, version=settings.server_version)
        self._serve = serve
        self._stop_event = asyncio.Event()
        self._unsub_inbound: Callable[[], None] | None = None
        self._server_task: asyncio.Task[None] | None = None
        self._stopped = False
        # Set when the MCP server task outlived shutdown; the process must exit without joining it.
        self.server_detached = False

    def request_stop(self) -> None:
        self._stop_event.set()

    async def start(self) -> None:
        if not self.access:
            logger.warning("app.start.empty_allow_list all inbound messages will be dropped")
        self._unsub_inbound = self.bus.subscribe(self.bridge.handle_inbound)
        await self.channel.start()
        logger.info(
            "app.started channel={} allowed_chats={} tools={}",
            self.channel.name,
            len(self.access),
            [str(tool.name) for tool in TOOLS],
        )

    async def run(self) -> None:
        """Run until a termination signal arrives or the MCP client disconnects."""
        loop = asyncio.get_running_loop()
        installed: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, self.request_stop)
                installed.append(sig)

        try:
            await self.start()
            self._server_task = asyncio.create_task(self._serve(self.server))
            stop_task = asyncio.create_task(self._stop_event.wait())
            done, _ = await asyncio.wait({self._server_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
            stop_task.cancel()
            if self._server_task in done and not self._server_task.cancelled():
                error = self._server_task.exception()
                if error is not None:
                    logger.opt(exception=error).error("app.server.error")
            else:
                logger.info("app.signal.received")
        finally:
            await self.shutdown()
            for sig in installed:
                loop.remove_signal_handler(sig)

    async def shutdown(self) -> None:
        """Drain pending requests, stop the channel, then stop the MCP server."""
        if self._stopped:
            return
        self._stopped = True
        cancelled = await self.bridge.shutdown()
        logger.info("app.shutdown.drained cancelled={}", cancelled)
        if cancelled:
            await asyncio.sleep(_DRAIN_GRACE_SECONDS)

        if self._unsub_inbound is not None:
            self._unsub_inbound()
            self._unsub_inbound = None
        await self.channel.stop()

        task = self._server_task
        if task is not None and not task.done():
            task.cancel()
            # The stdio reader thread only notices cancellation once stdin yields a line.
            done, _ = await asyncio.wait({task}, timeout=_SERVER_STOP_TIMEOUT_SECONDS)
            if not done:
                self.server_detached = True
                logger.warning("app.shutdown.server_detached timeout={}", _SERVER_STOP_TIMEOUT_SECONDS)
        logger.info("app.shutdown.complete")
