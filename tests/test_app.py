from __future__ import annotations

import asyncio

import pytest
from mcp.server.lowlevel import Server

from telegram_bridge.app import BridgeApp
from telegram_bridge.channels.base import BaseChannel
from telegram_bridge.channels.bus import InboundBus
from telegram_bridge.channels.events import InboundMessage, OutboundMessage
from telegram_bridge.config import Settings
from telegram_bridge.errors import RequestCancelledError
from tests.support import wait_for_pending


class FakeChannel(BaseChannel):
    name = "fake"

    def __init__(self, bus: InboundBus) -> None:
        super().__init__(bus)
        self.sent: list[tuple[int, str]] = []
        self.events: list[str] = []
        self.pending_at_stop: list[int] | None = None
        self.bridge_pending = lambda: []

    async def start(self) -> None:
        self._running = True
        self.events.append("start")

    async def stop(self) -> None:
        self.pending_at_stop = list(self.bridge_pending())
        self._running = False
        self.events.append("stop")

    async def send(self, message: OutboundMessage) -> None:
        self.sent.append((message.chat_id, message.content))


def _build_app(serve) -> tuple[BridgeApp, FakeChannel]:
    bus = InboundBus()
    channel = FakeChannel(bus)
    settings = Settings(bot_token="t", allowed_chat_ids={100})  # noqa: S106
    app = BridgeApp(settings, channel=channel, bus=bus, serve=serve)
    channel.bridge_pending = app.bridge.pending_chat_ids
    return app, channel


async def _serve_forever(_server: Server) -> None:
    await asyncio.Event().wait()


async def _wait_started(channel: FakeChannel) -> None:
    for _ in range(100):
        if channel.is_running:
            return
        await asyncio.sleep(0)
    raise AssertionError("channel did not start")


@pytest.mark.asyncio
async def test_inbound_messages_reach_bridge_through_bus() -> None:
    app, channel = _build_app(_serve_forever)
    run_task = asyncio.create_task(app.run())
    await _wait_started(channel)

    request = asyncio.create_task(app.dispatcher.call("request_user_input", {"chatId": 100, "prompt": "name?"}))
    await wait_for_pending(app.bridge, 100)
    await channel.publish_inbound(InboundMessage(channel="fake", chat_id=100, text="Ada"))

    assert await request == {"text": "Ada"}
    app.request_stop()
    await run_task


@pytest.mark.asyncio
async def test_stop_drains_pending_requests_before_channel_stops() -> None:
    app, channel = _build_app(_serve_forever)
    run_task = asyncio.create_task(app.run())
    await _wait_started(channel)

    request = asyncio.create_task(app.dispatcher.call("request_user_input", {"chatId": 100, "prompt": "p"}))
    await wait_for_pending(app.bridge, 100)

    app.request_stop()
    await run_task

    assert request.done()
    assert isinstance(request.exception(), RequestCancelledError)
    assert channel.pending_at_stop == []
    assert channel.events == ["start", "stop"]


@pytest.mark.asyncio
async def test_run_returns_when_client_disconnects() -> None:
    served: list[Server] = []

    async def _serve_once(server: Server) -> None:
        served.append(server)

    app, channel = _build_app(_serve_once)

    await app.run()

    assert served == [app.server]
    assert channel.events == ["start", "stop"]


@pytest.mark.asyncio
async def test_shutdown_is_idempotent() -> None:
    app, channel = _build_app(_serve_forever)
    await app.start()

    await app.shutdown()
    await app.shutdown()

    assert channel.events == ["start", "stop"]
    assert app.bridge.closed


@pytest.mark.asyncio
async def test_unauthorized_inbound_is_dropped_by_app_wiring() -> None:
    app, channel = _build_app(_serve_forever)
    await app.start()

    await channel.publish_inbound(InboundMessage(channel="fake", chat_id=555, text="hi"))
    await channel.publish_inbound(InboundMessage(channel="fake", chat_id=100, text="hi"))

    assert channel.sent == [(100, "You said: hi")]
    await app.shutdown()


class StuckServer:
    """Stands in for a stdio server whose reader thread ignores cancellation."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.cancel_requests = 0

    async def __call__(self, _server: Server) -> None:
        while not self.release.is_set():
            try:
                await self.release.wait()
            except asyncio.CancelledError:
                self.cancel_requests += 1


@pytest.mark.asyncio
async def test_shutdown_stops_channel_even_if_server_ignores_cancel(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("telegram_bridge.app._SERVER_STOP_TIMEOUT_SECONDS", 0.05)
    stuck = StuckServer()
    app, channel = _build_app(stuck)
    run_task = asyncio.create_task(app.run())
    await _wait_started(channel)

    app.request_stop()
    await asyncio.wait_for(run_task, timeout=5)

    assert channel.events == ["start", "stop"]
    assert stuck.cancel_requests >= 1
    assert app.server_detached

    stuck.release.set()
    server_task = app._server_task
    assert server_task is not None
    await server_task


@pytest.mark.asyncio
async def test_server_that_stops_promptly_is_not_detached() -> None:
    app, channel = _build_app(_serve_forever)
    run_task = asyncio.create_task(app.run())
    await _wait_started(channel)

    app.request_stop()
    await run_task

    assert not app.server_detached
