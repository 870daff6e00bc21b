from __future__ import annotations

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from signalr.protocol.constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_READ_TIMEOUT, DEFAULT_TOKEN_TTL
from signalr.protocol.errors import ConfigError

DEFAULT_CONFIG: Dict[str, Any] = {
    "connection_string": "",
    "read_timeout": DEFAULT_READ_TIMEOUT,
    "token_ttl": DEFAULT_TOKEN_TTL,
    "http_timeout": DEFAULT_HTTP_TIMEOUT,
    "log_level": "INFO",
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables (SIGNALR_<KEY>)."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_CONFIG.items():
        env_key = f"SIGNALR_{key.upper()}"
        value = os.getenv(env_key, default_value)
        CLIENT_CONFIG[key] = _coerce_type(value, type(default_value))

    validate_config(CLIENT_CONFIG)
    CLIENT_CONFIG["log_level"] = str(CLIENT_CONFIG["log_level"]).upper()
    logging.getLogger("signalr").setLevel(CLIENT_CONFIG["log_level"])
    return CLIENT_CONFIG


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def validate_config(config: Dict[str, Any]) -> None:
    if float(config["read_timeout"]) <= 0:
        raise ConfigError("read_timeout must be positive")
    if float(config["http_timeout"]) <= 0:
        raise ConfigError("http_timeout must be positive")
    if int(config["token_ttl"]) <= 0:
        raise ConfigError("token_ttl must be positive")
    if str(config["log_level"]).upper() not in logging.getLevelNamesMapping():
        raise ConfigError(f"unknown log_level {config['log_level']!r}")


def get(key: str, default: Any = None) -> Any:
    return CLIENT_CONFIG.get(key, default)


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "get", "load_config", "validate_config"]
