from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import FrozenSet, Union


class MessageType(IntEnum):
    """
    Integer discriminant carried in the `type` field of every hub envelope.
    Values are fixed by the wire protocol and start at 1.
    """

    INVOCATION = 1
    STREAM_ITEM = 2
    COMPLETION = 3
    STREAM_INVOCATION = 4
    CANCEL_INVOCATION = 5
    PING = 6
    CLOSE = 7


class AudienceType(StrEnum):
    """Role segment used in negotiate and websocket URIs."""

    SERVER = "server"
    CLIENT = "client"


class TransportType(StrEnum):
    WEBSOCKETS = "WebSockets"


# Kinds the client refuses to process; receiving one ends the listen loop.
UNSUPPORTED_TYPES: FrozenSet[int] = frozenset(
    {
        MessageType.STREAM_ITEM.value,
        MessageType.COMPLETION.value,
        MessageType.STREAM_INVOCATION.value,
        MessageType.CANCEL_INVOCATION.value,
    }
)


def normalize_type(value: Union[int, MessageType]) -> int:
    """Convert enum/int into the integer sent on the wire."""
    return value.value if isinstance(value, MessageType) else int(value)


def is_known_type(value: int) -> bool:
    """Check if `value` is a message kind defined by the protocol."""
    try:
        MessageType(value)
        return True
    except ValueError:
        return False


def is_supported(value: int) -> bool:
    """Known kinds the receive loop handles (invocation, ping, close)."""
    return is_known_type(value) and value not in UNSUPPORTED_TYPES


__all__ = [
    "MessageType",
    "AudienceType",
    "TransportType",
    "UNSUPPORTED_TYPES",
    "normalize_type",
    "is_known_type",
    "is_supported",
]
