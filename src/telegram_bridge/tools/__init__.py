"""Tool surface exposed over MCP."""

from telegram_bridge.tools.dispatch import ToolDispatcher, parse_arguments
from telegram_bridge.tools.schemas import (
    TOOLS,
    RequestUserInputArgs,
    SendMessageArgs,
    ToolDescriptor,
    ToolName,
)

__all__ = [
    "TOOLS",
    "RequestUserInputArgs",
    "SendMessageArgs",
    "ToolDescriptor",
    "ToolDispatcher",
    "ToolName",
    "parse_arguments",
]
