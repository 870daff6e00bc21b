"""
Hub protocol package: message kinds, envelope models, record-separator framing,
schema validation and the error taxonomy shared by the client modules.
"""

from .constants import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_TOKEN_TTL,
    ENCODING,
    PROTOCOL_NAME,
    PROTOCOL_VERSION,
    RECORD_SEPARATOR,
)
from .errors import (
    AuthError,
    ConfigError,
    DispatchError,
    HandshakeError,
    NegotiationError,
    ProtocolError,
    SendFailureError,
    ServerCloseError,
    SignalRError,
    TransportError,
)
from .framing import decode_msg, encode_json, encode_msg, strip_terminator
from .message_types import AudienceType, MessageType, TransportType, UNSUPPORTED_TYPES, is_known_type, is_supported
from .messages import (
    AvailableTransport,
    HandshakeRequest,
    HandshakeResponse,
    InvocationMessage,
    NegotiateResponse,
    new_invocation_message,
)
from .validator import load_schema, validate_envelope, validate_handshake_response, validate_negotiate

__all__ = [
    "DEFAULT_HTTP_TIMEOUT",
    "DEFAULT_READ_TIMEOUT",
    "DEFAULT_TOKEN_TTL",
    "ENCODING",
    "PROTOCOL_NAME",
    "PROTOCOL_VERSION",
    "RECORD_SEPARATOR",
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
    "encode_json",
    "encode_msg",
    "decode_msg",
    "strip_terminator",
    "MessageType",
    "AudienceType",
    "TransportType",
    "UNSUPPORTED_TYPES",
    "is_known_type",
    "is_supported",
    "InvocationMessage",
    "HandshakeRequest",
    "HandshakeResponse",
    "AvailableTransport",
    "NegotiateResponse",
    "new_invocation_message",
    "load_schema",
    "validate_envelope",
    "validate_handshake_response",
    "validate_negotiate",
]
