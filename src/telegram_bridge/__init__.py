"""Telegram bridge - ask a human over Telegram from an MCP tool call."""

from telegram_bridge.access import AccessFilter
from telegram_bridge.bridge import CorrelationBridge, PendingRequest

__version__ = "2.0.0"

__all__ = ["AccessFilter", "CorrelationBridge", "PendingRequest"]
