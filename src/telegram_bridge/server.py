"""MCP server surface over stdio."""

from __future__ import annotations

import json
from typing import Any

from loguru import logger
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from telegram_bridge.errors import BridgeError
from telegram_bridge.tools import TOOLS, ToolDispatcher, ToolName

_SENT_TEXT = "Message sent successfully"


def list_tools() -> list[types.Tool]:
    return [
        types.Tool(name=str(tool.name), description=tool.description, inputSchema=tool.input_schema)
        for tool in TOOLS
    ]


def _error_result(kind: str, code: int, message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"{kind}: {message}")],
        structuredContent={"error": {"kind": kind, "code": code, "message": message}},
        isError=True,
    )


async def call_tool(dispatcher: ToolDispatcher, name: str, arguments: Any) -> types.CallToolResult:
    """Run one tool call and convert the outcome into a CallToolResult."""
    try:
        result = await dispatcher.call(name, arguments)
    except BridgeError as exc:
        logger.info("server.call_tool.error name={} kind={} message={}", name, exc.kind, exc.message)
        return _error_result(exc.kind, exc.code, exc.message)
    except Exception as exc:
        logger.exception("server.call_tool.unexpected name={}", name)
        return _error_result("InternalError", -32603, str(exc) or type(exc).__name__)

    if name == ToolName.REQUEST_USER_INPUT:
        text = result["text"]
    elif name == ToolName.SEND_MESSAGE:
        text = _SENT_TEXT
    else:
        text = json.dumps(result, ensure_ascii=False)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent=result,
    )


def build_server(dispatcher: ToolDispatcher, *, name: str = "telegram-server", version: str = "2.0.0") -> Server:
    server: Server = Server(name, version=version)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return list_tools()

    # Arguments are validated by the typed tool models, not by the JSON schema.
    @server.call_tool(validate_input=False)
    async def _call_tool(tool_name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        return await call_tool(dispatcher, tool_name, arguments)

    return server


async def serve_stdio(server: Server) -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info("server.stdio.running name={}", server.name)
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("server.stdio.closed")
