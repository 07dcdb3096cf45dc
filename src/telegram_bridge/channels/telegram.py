"""Telegram channel adapter."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from telegram import Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from telegram_bridge.channels.base import BaseChannel
from telegram_bridge.channels.bus import InboundBus
from telegram_bridge.channels.events import InboundMessage, OutboundMessage
from telegram_bridge.errors import ChannelError


@dataclass(frozen=True)
class TelegramConfig:
    """Telegram adapter config."""

    token: str
    drop_pending_updates: bool = True


class TelegramChannel(BaseChannel):
    """Telegram adapter using long polling mode.

    Every new message is published on the bus, including messages without text, so the
    bridge can tell an unusable reply apart from no reply at all. Access control is left
    to the consumer of the bus.
    """

    name = "telegram"

    def __init__(self, bus: InboundBus, config: TelegramConfig) -> None:
        super().__init__(bus)
        self._config = config
        self._app: Application | None = None

    async def start(self) -> None:
        if not self._config.token:
            raise ChannelError("telegram token is empty")
        self._app = Application.builder().token(self._config.token).build()
        self._app.add_handler(MessageHandler(filters.UpdateType.MESSAGE, self._on_message))
        await self._app.initialize()
        await self._app.start()
        self._running = True
        logger.info("telegram.channel.start bot_username={}", self._app.bot.username)
        updater = self._app.updater
        if updater is None:
            return
        await updater.start_polling(
            drop_pending_updates=self._config.drop_pending_updates,
            allowed_updates=["message"],
        )
        logger.info("telegram.channel.polling")

    async def stop(self) -> None:
        self._running = False
        if self._app is None:
            return
        updater = self._app.updater
        if updater is not None and updater.running:
            await updater.stop()
        if self._app.running:
            await self._app.stop()
        await self._app.shutdown()
        self._app = None
        logger.info("telegram.channel.stopped")

    async def send(self, message: OutboundMessage) -> None:
        if self._app is None or not self._running:
            raise ChannelError("telegram channel is not running")
        await self._app.bot.send_message(chat_id=message.chat_id, text=message.content)
        logger.debug("telegram.channel.sent chat_id={} length={}", message.chat_id, len(message.content))

    async def _on_message(self, update: Update, _context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        if message is None:
            return
        user = update.effective_user
        chat_id = message.chat_id
        text = message.text

        logger.info(
            "telegram.channel.inbound chat_id={} sender_id={} content={}",
            chat_id,
            user.id if user else "",
            (text or "")[:100],
        )
        await self.publish_inbound(
            InboundMessage(
                channel=self.name,
                chat_id=chat_id,
                text=text,
                sender_id=str(user.id) if user else "",
                metadata={
                    "username": (user.username or "") if user else "",
                    "message_id": message.message_id,
                },
            )
        )
