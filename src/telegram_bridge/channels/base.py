"""Base channel interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from telegram_bridge.channels.bus import InboundBus
from telegram_bridge.channels.events import InboundMessage, OutboundMessage


class BaseChannel(ABC):
    """Abstract base class for channel adapters."""

    name: str = "base"

    def __init__(self, bus: InboundBus) -> None:
        self.bus = bus
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @abstractmethod
    async def start(self) -> None:
        """Connect to the transport and begin receiving messages."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop receiving and release transport resources."""

    @abstractmethod
    async def send(self, message: OutboundMessage) -> None:
        """Deliver one message. Raises on transport failure."""

    async def publish_inbound(self, message: InboundMessage) -> None:
        await self.bus.publish(message)
