from __future__ import annotations

import asyncio

from telegram_bridge.bridge import CorrelationBridge
from telegram_bridge.channels.events import OutboundMessage

ALLOWED_CHATS = {100, 200, 300}


class RecordingOutbound:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[int, str]] = []

    async def send(self, message: OutboundMessage) -> None:
        if self.fail:
            raise RuntimeError("network down")
        self.sent.append((message.chat_id, message.content))


async def wait_for_pending(bridge: CorrelationBridge, chat_id: int) -> None:
    for _ in range(100):
        if bridge.get_pending(chat_id) is not None:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"no pending request for chat {chat_id}")
