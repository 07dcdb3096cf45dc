"""Configuration management for the Telegram bridge."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, StrictInt, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from telegram_bridge.errors import ConfigurationError

DEFAULT_REQUEST_TIMEOUT_SECONDS = 300.0

# Keys of the `telegram` section in a JSON config file.
_CONFIG_FILE_KEYS = {
    "botToken": "bot_token",
    "allowedChatIds": "allowed_chat_ids",
    "requestTimeoutSeconds": "request_timeout_seconds",
}


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_BRIDGE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram
    bot_token: str = Field(default="", description="Telegram bot token")
    allowed_chat_ids: set[StrictInt] | None = Field(default=None, description="Chat ids allowed to talk to the bot")

    # Bridge
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        gt=0,
        description="How long request_user_input waits for a reply",
    )
    echo_template: str = Field(default="You said: {text}", description="Reply sent for uncorrelated messages")

    # MCP server
    server_name: str = Field(default="telegram-server")
    server_version: str = Field(default="2.0.0")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: Literal["default", "rich"] = Field(default="default", description="Log output profile")

    @field_validator("bot_token")
    @classmethod
    def _strip_token(cls, value: str) -> str:
        return value.strip()

    @field_validator("echo_template")
    @classmethod
    def _check_template(cls, value: str) -> str:
        if "{text}" not in value:
            raise ValueError("echo_template must contain a {text} placeholder")
        return value


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the `telegram` section of a JSON config file into settings fields."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"config file is not valid JSON: {path}: {exc}") from exc

    section = raw.get("telegram") if isinstance(raw, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(f"missing telegram section in {path}")

    values: dict[str, Any] = {}
    for key, field_name in _CONFIG_FILE_KEYS.items():
        if key in section:
            values[field_name] = section[key]
    if "allowed_chat_ids" in values and not isinstance(values["allowed_chat_ids"], list):
        raise ConfigurationError("telegram.allowedChatIds must be a list of chat ids")
    return values


def load_settings(config_path: Path | None = None, **overrides: Any) -> Settings:
    """Load settings from the environment, an optional JSON file and explicit overrides.

    Explicit overrides win over the config file, which wins over the environment.

    Raises:
        ConfigurationError: if the bot token or the allow-list is missing or malformed.
    """
    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(read_config_file(config_path))
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        settings = Settings(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc

    if not settings.bot_token:
        raise ConfigurationError("missing Telegram bot token (telegram.botToken or TELEGRAM_BRIDGE_BOT_TOKEN)")
    if settings.allowed_chat_ids is None:
        raise ConfigurationError(
            "missing allowed chat ids (telegram.allowedChatIds or TELEGRAM_BRIDGE_ALLOWED_CHAT_IDS)"
        )
    return settings
