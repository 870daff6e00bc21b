"""
Client for hub-based real-time messaging services speaking the JSON hub protocol
(Azure SignalR Service): negotiate, listen on a websocket, and send over REST.
"""

from .client import Client
from .config import CLIENT_CONFIG, DEFAULT_CONFIG, load_config
from .connection_string import ParsedConnectionString, parse_connection_string
from .core import Context, FunctionHandler, Handler, InvocationContext, NotifiedHandler
from .protocol import (
    AudienceType,
    AuthError,
    ConfigError,
    DispatchError,
    HandshakeError,
    InvocationMessage,
    MessageType,
    NegotiationError,
    ProtocolError,
    SendFailureError,
    ServerCloseError,
    SignalRError,
    TransportError,
    new_invocation_message,
)

__all__ = [
    "Client",
    "CLIENT_CONFIG",
    "DEFAULT_CONFIG",
    "load_config",
    "ParsedConnectionString",
    "parse_connection_string",
    "Context",
    "InvocationContext",
    "Handler",
    "FunctionHandler",
    "NotifiedHandler",
    "AudienceType",
    "MessageType",
    "InvocationMessage",
    "new_invocation_message",
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
