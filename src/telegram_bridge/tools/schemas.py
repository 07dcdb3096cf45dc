"""Tool names, argument models and the static tool listing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class ToolName(StrEnum):
    SEND_MESSAGE = "send_message"
    REQUEST_USER_INPUT = "request_user_input"


class ToolArguments(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SendMessageArgs(ToolArguments):
    chat_id: StrictInt = Field(alias="chatId")
    message: StrictStr


class RequestUserInputArgs(ToolArguments):
    chat_id: StrictInt = Field(alias="chatId")
    prompt: StrictStr


@dataclass(frozen=True)
class ToolDescriptor:
    """Tool metadata advertised to MCP clients."""

    name: ToolName
    description: str
    input_schema: dict[str, Any]
    arguments: type[ToolArguments]


TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name=ToolName.SEND_MESSAGE,
        description="Send a message through Telegram",
        input_schema={
            "type": "object",
            "properties": {
                "chatId": {"type": "integer", "description": "Telegram chat id"},
                "message": {"type": "string", "description": "Text to send"},
            },
            "required": ["chatId", "message"],
        },
        arguments=SendMessageArgs,
    ),
    ToolDescriptor(
        name=ToolName.REQUEST_USER_INPUT,
        description=(
            "Request user input through Telegram. Sends the prompt to the chat and waits "
            "for the next message from that chat, returning its text."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "chatId": {"type": "integer", "description": "Telegram chat id"},
                "prompt": {"type": "string", "description": "Question shown to the user"},
            },
            "required": ["chatId", "prompt"],
        },
        arguments=RequestUserInputArgs,
    ),
)


def get_descriptor(name: str) -> ToolDescriptor | None:
    for descriptor in TOOLS:
        if descriptor.name == name:
            return descriptor
    return None
