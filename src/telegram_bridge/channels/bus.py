"""Inbound event bus between channels and the bridge."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any

from blinker import Signal
from loguru import logger

from telegram_bridge.channels.events import InboundMessage

InboundHandler = Callable[[InboundMessage], Coroutine[Any, Any, None]]


class InboundBus:
    """Fan inbound chat messages out to subscribers, one message at a time.

    Subscribers are awaited in order before `publish` returns, so the per-chat order the
    transport delivers is the order every subscriber sees.
    """

    def __init__(self) -> None:
        self._signal = Signal("telegram_bridge.inbound")

    @property
    def has_subscribers(self) -> bool:
        return bool(self._signal.receivers)

    async def publish(self, message: InboundMessage) -> int:
        """Deliver a message to every subscriber. Returns how many received it."""
        if not self.has_subscribers:
            logger.debug("bus.inbound.unrouted channel={} chat_id={}", message.channel, message.chat_id)
            return 0
        results = await self._signal.send_async(self, message=message)
        return len(results)

    def subscribe(self, handler: InboundHandler) -> Callable[[], None]:
        """Register a handler; the returned callable removes it again."""

        async def _receiver(_sender: Any, *, message: InboundMessage) -> None:
            await handler(message)

        self._signal.connect(_receiver, weak=False)
        return lambda: self._signal.disconnect(_receiver)
