"""Protocol-wide constants for the JSON hub protocol."""

ENCODING = "utf-8"
RECORD_SEPARATOR = "\x1e"
PROTOCOL_NAME = "json"
PROTOCOL_VERSION = 1
DEFAULT_TOKEN_TTL = 2 * 60 * 60  # seconds
DEFAULT_READ_TIMEOUT = 5.0  # seconds, per websocket frame
DEFAULT_HTTP_TIMEOUT = 30.0  # seconds
API_VERSION_PATH = "api/v1"

__all__ = [
    "ENCODING",
    "RECORD_SEPARATOR",
    "PROTOCOL_NAME",
    "PROTOCOL_VERSION",
    "DEFAULT_TOKEN_TTL",
    "DEFAULT_READ_TIMEOUT",
    "DEFAULT_HTTP_TIMEOUT",
    "API_VERSION_PATH",
]
