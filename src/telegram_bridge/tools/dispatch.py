"""Validate tool arguments and dispatch them to the bridge."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from telegram_bridge.bridge import CorrelationBridge
from telegram_bridge.errors import InvalidArgumentsError, UnknownOperationError
from telegram_bridge.tools.schemas import (
    RequestUserInputArgs,
    SendMessageArgs,
    ToolArguments,
    ToolName,
    get_descriptor,
)


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "arguments"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_arguments(name: ToolName, arguments: Any) -> ToolArguments:
    """Validate raw tool arguments into the typed model for one tool."""
    descriptor = get_descriptor(name)
    if descriptor is None:
        raise UnknownOperationError(f"Unknown tool: {name}")
    if not isinstance(arguments, Mapping):
        raise InvalidArgumentsError("Invalid arguments")
    try:
        return descriptor.arguments.model_validate(dict(arguments))
    except ValidationError as exc:
        raise InvalidArgumentsError(f"Invalid argument types: {_describe_errors(exc)}") from exc


class ToolDispatcher:
    """Route tool calls by name to bridge operations."""

    def __init__(self, bridge: CorrelationBridge) -> None:
        self.bridge = bridge

    async def call(self, name: str, arguments: Any) -> dict[str, Any]:
        try:
            tool = ToolName(name)
        except ValueError:
            logger.warning("tools.unknown name={}", name)
            raise UnknownOperationError(f"Unknown tool: {name}") from None

        args = parse_arguments(tool, arguments)
        logger.info("tools.call name={}", tool)
        match args:
            case SendMessageArgs():
                await self.bridge.send(args.chat_id, args.message)
                return {"status": "sent"}
            case RequestUserInputArgs():
                text = await self.bridge.request_input(args.chat_id, args.prompt)
                return {"text": text}
        raise UnknownOperationError(f"Unknown tool: {name}")
