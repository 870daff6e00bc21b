from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from .errors import ProtocolError

SCHEMA_DIR = Path(__file__).parent / "schemas"

# Mapping document kind -> schema filename (relative to SCHEMA_DIR)
SCHEMA_REGISTRY: Dict[str, str] = {
    "envelope": "envelope.json",
    "handshake_response": "handshake_response.json",
    "negotiate": "negotiate.json",
}


def _schema_path(kind: str) -> Optional[Path]:
    filename = SCHEMA_REGISTRY.get(kind)
    if not filename:
        return None
    path = SCHEMA_DIR / filename
    return path if path.exists() else None


@lru_cache(maxsize=8)
def load_schema(kind: str) -> Optional[dict]:
    """Load JSON schema for a document kind if present."""
    path = _schema_path(kind)
    if not path:
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def validate_doc(doc: Dict[str, Any], kind: str, schema: Optional[dict] = None) -> None:
    """Validate a decoded document against the schema registered for `kind`."""
    if not schema:
        schema = load_schema(kind)
    if schema:
        try:
            jsonschema.validate(instance=doc, schema=schema)
        except jsonschema.ValidationError as exc:
            raise ProtocolError(f"Schema validation failed for {kind}: {exc.message}") from exc


def validate_envelope(doc: Dict[str, Any]) -> None:
    validate_doc(doc, "envelope")


def validate_handshake_response(doc: Dict[str, Any]) -> None:
    validate_doc(doc, "handshake_response")


def validate_negotiate(doc: Dict[str, Any]) -> None:
    validate_doc(doc, "negotiate")


__all__ = [
    "load_schema",
    "validate_doc",
    "validate_envelope",
    "validate_handshake_response",
    "validate_negotiate",
]
