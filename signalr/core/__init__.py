from .context import Context, InvocationContext
from .dispatch import dispatch
from .handler import FunctionHandler, Handler, NotifiedHandler
from .network import ConnectionState, HubConnection
from .session import HubSession
from .transport import WebSocketChannel, http_request

__all__ = [
    "Context",
    "InvocationContext",
    "dispatch",
    "Handler",
    "FunctionHandler",
    "NotifiedHandler",
    "ConnectionState",
    "HubConnection",
    "HubSession",
    "WebSocketChannel",
    "http_request",
]
