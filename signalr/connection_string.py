from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from signalr.protocol.errors import ConfigError


@dataclass(frozen=True)
class ParsedConnectionString:
    endpoint: str
    key: str = ""
    version: str = ""


def parse_connection_string(conn_str: str) -> ParsedConnectionString:
    """
    Parse `Endpoint=...;AccessKey=...;Version=...;` as shown in the Azure portal.
    Keys may appear in any order and the trailing `;` is optional. Values may contain
    `=` (base64 keys), so each segment is split on its first `=` only.
    """
    fields = {"Endpoint": "", "AccessKey": "", "Version": ""}
    trimmed = conn_str[:-1] if conn_str.endswith(";") else conn_str
    for segment in trimmed.split(";"):
        key, sep, value = segment.partition("=")
        if not sep:
            raise ConfigError(f"connStr: {conn_str} did not have a '=' between the ';', so it's malformed.")
        if key not in fields:
            raise ConfigError(f"unknown key == {key}")
        fields[key] = value

    endpoint = fields["Endpoint"].rstrip("/")
    if endpoint:
        parts = urlsplit(endpoint)
        if not parts.scheme or not parts.netloc:
            raise ConfigError(f"Endpoint {endpoint!r} is not an absolute URL")
    return ParsedConnectionString(endpoint=endpoint, key=fields["AccessKey"], version=fields["Version"])


__all__ = ["ParsedConnectionString", "parse_connection_string"]
