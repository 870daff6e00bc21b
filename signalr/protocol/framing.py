from __future__ import annotations

import json
from typing import Any, Dict, Union

from .constants import ENCODING, RECORD_SEPARATOR
from .errors import ProtocolError


def encode_json(msg: Dict[str, Any]) -> str:
    """Compact JSON body without the record separator (REST payloads)."""
    try:
        body = json.dumps(msg, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise ProtocolError(f"Encode failed: {exc}") from exc

    if RECORD_SEPARATOR in body:
        raise ProtocolError("Encoded message contains the record separator")
    return body


def encode_msg(msg: Dict[str, Any]) -> str:
    """Encode message dict into one text frame (JSON + record separator)."""
    return encode_json(msg) + RECORD_SEPARATOR


def strip_terminator(data: str) -> str:
    """Drop a single trailing record separator, if present."""
    if data.endswith(RECORD_SEPARATOR):
        return data[: -len(RECORD_SEPARATOR)]
    return data


def decode_msg(data: Union[str, bytes]) -> Dict[str, Any]:
    """Decode one received frame into a dictionary."""
    try:
        text = data.decode(ENCODING) if isinstance(data, (bytes, bytearray)) else data
    except UnicodeDecodeError as exc:
        raise ProtocolError(f"Decode failed: {exc}") from exc

    text = strip_terminator(text)
    if not text:
        raise ProtocolError("Decode failed: empty frame")
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"Decode failed: {exc}") from exc
    if not isinstance(decoded, dict):
        raise ProtocolError(f"Decode failed: expected a JSON object, got {type(decoded).__name__}")
    return decoded


__all__ = ["encode_json", "encode_msg", "decode_msg", "strip_terminator"]
