from __future__ import annotations

import time
from uuid import uuid4


def generate_client_name() -> str:
    """Random name used to address a client when none is configured."""
    return str(uuid4())


def utc_timestamp() -> int:
    """Current UTC timestamp in seconds."""
    return int(time.time())


__all__ = ["generate_client_name", "utc_timestamp"]
