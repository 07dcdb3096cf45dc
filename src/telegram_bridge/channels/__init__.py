"""Channel adapters and bus exports."""

from telegram_bridge.channels.base import BaseChannel
from telegram_bridge.channels.bus import InboundBus
from telegram_bridge.channels.events import InboundMessage, OutboundMessage
from telegram_bridge.channels.telegram import TelegramChannel, TelegramConfig

__all__ = [
    "BaseChannel",
    "InboundBus",
    "InboundMessage",
    "OutboundMessage",
    "TelegramChannel",
    "TelegramConfig",
]
