from __future__ import annotations

from typing import Optional


class SignalRError(Exception):
    """Base class for every error raised by the library."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class ConfigError(SignalRError):
    """Raised for malformed connection strings or invalid configuration values."""


class AuthError(SignalRError):
    """Token signing failed."""


class NegotiationError(SignalRError):
    """The negotiate exchange failed or advertised no usable transport."""


class SendFailureError(NegotiationError):
    """A REST call answered with a status code above 399."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"failed to send message with status code {status_code} and body: {body!r}")

    def to_payload(self) -> dict:
        """Map error into a dict for callers that log or forward failures."""
        return {"status_code": self.status_code, "body": self.body}


class TransportError(SignalRError):
    """Channel open/read/write failed, or an HTTP request could not be completed."""


class HandshakeError(SignalRError):
    """The service rejected the protocol handshake."""


class ProtocolError(SignalRError):
    """A frame could not be decoded, or its message kind is not supported."""

    def __init__(self, message: str = "", message_type: Optional[int] = None) -> None:
        self.message_type = message_type
        super().__init__(message)


class DispatchError(SignalRError):
    """A handler raised or returned an error while processing an invocation."""

    def __init__(self, target: str, message: str = "") -> None:
        self.target = target
        super().__init__(message or f"handler for {target!r} failed")


class ServerCloseError(SignalRError):
    """The service closed the connection and reported an error; str() is the error text."""


__all__ = [
    "SignalRError",
    "ConfigError",
    "AuthError",
    "NegotiationError",
    "SendFailureError",
    "TransportError",
    "HandshakeError",
    "ProtocolError",
    "DispatchError",
    "ServerCloseError",
]
