"""Exception types for the Telegram bridge."""

from __future__ import annotations

from typing import Any, ClassVar


class BridgeError(Exception):
    """Base exception for errors surfaced to tool callers."""

    kind: ClassVar[str] = "BridgeError"
    code: ClassVar[int] = -32603

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_payload(self) -> dict[str, Any]:
        return {"kind": self.kind, "code": self.code, "message": self.message}

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidArgumentsError(BridgeError):
    """Raised when tool arguments are missing or have the wrong type."""

    kind = "InvalidArguments"
    code = -32602


class UnknownOperationError(BridgeError):
    """Raised when a tool call names an operation that is not implemented."""

    kind = "UnknownOperation"
    code = -32601


class DeliveryFailedError(BridgeError):
    """Raised when the outbound transport could not deliver a message."""

    kind = "DeliveryFailed"
    code = -32603


class RequestTimeoutError(BridgeError):
    """Raised when no reply arrived before the request deadline."""

    kind = "Timeout"
    code = 1000


class InvalidInputError(BridgeError):
    """Raised when a reply arrived but carried no usable text."""

    kind = "InvalidInput"
    code = -32602


class BusyError(BridgeError):
    """Raised when a chat already has a request awaiting its reply."""

    kind = "Busy"
    code = 1001


class RequestCancelledError(BridgeError):
    """Raised for requests still outstanding when the bridge shuts down."""

    kind = "Cancelled"
    code = 1002


class ChannelError(Exception):
    """Raised when a messaging channel is not able to send."""


class ConfigurationError(Exception):
    """Raised when startup configuration is missing or malformed."""
