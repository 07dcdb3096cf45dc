"""Correlate outbound prompts with the next inbound reply on the same chat."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger

from telegram_bridge.access import AccessFilter
from telegram_bridge.channels.events import InboundMessage, OutboundMessage
from telegram_bridge.config import DEFAULT_REQUEST_TIMEOUT_SECONDS
from telegram_bridge.errors import (
    BridgeError,
    BusyError,
    DeliveryFailedError,
    InvalidInputError,
    RequestCancelledError,
    RequestTimeoutError,
)


class Outbound(Protocol):
    async def send(self, message: OutboundMessage) -> None: ...


@dataclass(eq=False)
class PendingRequest:
    """One in-flight request_input call."""

    chat_id: int
    future: asyncio.Future[str]
    deadline: float
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)


class CorrelationBridge:
    """Owns the registry of pending requests, at most one per chat.

    All registry mutations happen on the event loop without awaiting in between, so
    removing an entry and resolving its future is a single step. Inbound messages and
    timer callbacks run on the same loop and never wait on a suspended caller.
    """

    def __init__(
        self,
        outbound: Outbound,
        access: AccessFilter,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        echo_template: str = "You said: {text}",
    ) -> None:
        if request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        self._outbound = outbound
        self._access = access
        self._request_timeout = request_timeout
        self._echo_template = echo_template
        self._pending: dict[int, PendingRequest] = {}
        # Chats whose prompt is being delivered but not yet registered.
        self._reserved: set[int] = set()
        self._closed = False

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    @property
    def closed(self) -> bool:
        return self._closed

    def get_pending(self, chat_id: int) -> PendingRequest | None:
        return self._pending.get(chat_id)

    def pending_chat_ids(self) -> list[int]:
        return list(self._pending)

    async def send(self, chat_id: int, text: str) -> None:
        """Deliver text to a chat. Raises DeliveryFailedError on transport failure."""
        await self._deliver(chat_id, text)
        logger.info("bridge.send chat_id={} length={}", chat_id, len(text))

    async def request_input(self, chat_id: int, prompt: str) -> str:
        """Send a prompt and wait for the next message from the same chat.

        Raises:
            BusyError: the chat already has a request awaiting its reply.
            DeliveryFailedError: the prompt could not be sent; nothing is registered.
            RequestTimeoutError: no reply arrived before the deadline.
            InvalidInputError: the reply carried no usable text.
            RequestCancelledError: the bridge shut down while waiting.
        """
        if self._closed:
            raise RequestCancelledError("bridge is shutting down")
        if chat_id in self._pending or chat_id in self._reserved:
            logger.warning("bridge.request.busy chat_id={}", chat_id)
            raise BusyError(f"chat {chat_id} is already awaiting a reply")

        self._reserved.add(chat_id)
        try:
            await self._deliver(chat_id, prompt)
            if self._closed:
                raise RequestCancelledError("bridge is shutting down")
            pending = self._register(chat_id)
        finally:
            self._reserved.discard(chat_id)

        logger.info("bridge.request.waiting chat_id={} timeout={}", chat_id, self._request_timeout)
        try:
            return await pending.future
        finally:
            # The caller was cancelled while waiting.
            if self._settle(pending, error=RequestCancelledError("request was cancelled by the caller")):
                logger.info("bridge.request.abandoned chat_id={}", chat_id)

    async def on_inbound_message(self, chat_id: int, text: str | None) -> None:
        """Route one inbound message to a waiting request or to the echo reply."""
        if not self._access.is_authorized(chat_id):
            logger.warning("bridge.inbound.unauthorized chat_id={}", chat_id)
            return

        pending = self._pending.get(chat_id)
        if text is None or not text.strip():
            if pending is None:
                logger.debug("bridge.inbound.empty_dropped chat_id={}", chat_id)
                return
            self._settle(pending, error=InvalidInputError("Invalid message type"))
            logger.info("bridge.request.invalid_input chat_id={}", chat_id)
            return

        if pending is not None:
            self._settle(pending, result=text)
            logger.info("bridge.request.resolved chat_id={}", chat_id)
            return

        await self._echo(chat_id, text)

    async def handle_inbound(self, message: InboundMessage) -> None:
        """Bus adapter for on_inbound_message."""
        await self.on_inbound_message(message.chat_id, message.text)

    async def shutdown(self) -> int:
        """Cancel every outstanding request. Returns how many were cancelled."""
        self._closed = True
        pending = list(self._pending.values())
        for request in pending:
            self._settle(request, error=RequestCancelledError("server is shutting down"))
        if pending:
            logger.info("bridge.shutdown.cancelled count={}", len(pending))
            # Let the waiting callers observe their result before the transport goes away.
            await asyncio.sleep(0)
        return len(pending)

    def _register(self, chat_id: int) -> PendingRequest:
        loop = asyncio.get_running_loop()
        pending = PendingRequest(
            chat_id=chat_id,
            future=loop.create_future(),
            deadline=loop.time() + self._request_timeout,
        )
        pending.timer = loop.call_at(pending.deadline, self._expire, pending)
        self._pending[chat_id] = pending
        return pending

    def _expire(self, pending: PendingRequest) -> None:
        if self._settle(pending, error=RequestTimeoutError("Request timed out")):
            logger.warning("bridge.request.timeout chat_id={}", pending.chat_id)

    def _settle(
        self,
        pending: PendingRequest,
        *,
        result: str | None = None,
        error: BridgeError | None = None,
    ) -> bool:
        """Remove the request and complete its future. No-op if it was already settled."""
        if self._pending.get(pending.chat_id) is not pending:
            return False
        del self._pending[pending.chat_id]
        if pending.timer is not None:
            pending.timer.cancel()
        if not pending.future.done():
            if error is not None:
                pending.future.set_exception(error)
            else:
                pending.future.set_result(result or "")
        return True

    async def _deliver(self, chat_id: int, text: str) -> None:
        try:
            await self._outbound.send(OutboundMessage(chat_id=chat_id, content=text))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("bridge.delivery.failed chat_id={} error={}", chat_id, exc)
            raise DeliveryFailedError(f"could not deliver message to chat {chat_id}: {exc}") from exc

    async def _echo(self, chat_id: int, text: str) -> None:
        try:
            await self._outbound.send(OutboundMessage(chat_id=chat_id, content=self._echo_template.format(text=text)))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("bridge.echo.error chat_id={}", chat_id)
            return
        logger.info("bridge.echo chat_id={}", chat_id)
