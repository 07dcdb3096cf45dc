"""Channel event models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class InboundMessage:
    """Message received from an external channel.

    `text` is None when the message carried no text (photos, stickers, service messages).
    """

    channel: str
    chat_id: int
    text: str | None
    sender_id: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class OutboundMessage:
    """Message to be delivered to one chat."""

    chat_id: int
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
