from __future__ import annotations

import json

from typer.testing import CliRunner

from telegram_bridge.__main__ import app

runner = CliRunner()


def test_tools_command_prints_listing() -> None:
    result = runner.invoke(app, ["tools"])

    assert result.exit_code == 0
    listing = json.loads(result.stdout)
    assert [tool["name"] for tool in listing] == ["send_message", "request_user_input"]
    assert listing[0]["inputSchema"]["required"] == ["chatId", "message"]


def test_serve_without_configuration_exits_with_error() -> None:
    result = runner.invoke(app, ["serve"])

    assert result.exit_code == 2
    assert "bot token" in result.output
