from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .constants import PROTOCOL_NAME, PROTOCOL_VERSION
from .errors import ProtocolError
from .message_types import MessageType, TransportType, normalize_type

ModelT = TypeVar("ModelT", bound="HubModel")


class HubModel(BaseModel):
    """Base for every document exchanged with the service."""

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_dict(cls: Type[ModelT], data: Dict[str, Any]) -> ModelT:
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(f"{cls.__name__} validation failed: {exc}") from exc

    def to_wire(self) -> Dict[str, Any]:
        """Dump using wire field names, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class InvocationMessage(HubModel):
    """Envelope shared by every message kind on the duplex channel and by REST sends."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: int = Field(default=MessageType.INVOCATION.value, description="MessageType discriminant")
    headers: Optional[Dict[str, str]] = None
    invocation_id: Optional[str] = Field(default=None, alias="invocationId")
    target: str = ""
    arguments: List[Any] = Field(default_factory=list, description="Raw JSON values, one per argument")
    error: Optional[str] = None

    @property
    def message_type(self) -> Optional[MessageType]:
        try:
            return MessageType(self.type)
        except ValueError:
            return None


class HandshakeRequest(HubModel):
    protocol: str = PROTOCOL_NAME
    version: int = PROTOCOL_VERSION


class HandshakeResponse(HubModel):
    error: Optional[str] = None


class AvailableTransport(HubModel):
    transport: str
    transport_formats: List[str] = Field(default_factory=list, alias="transportFormats")


class NegotiateResponse(HubModel):
    connection_id: Optional[str] = Field(default=None, alias="connectionId")
    available_transports: List[AvailableTransport] = Field(default_factory=list, alias="availableTransports")

    def supports(self, transport: str = TransportType.WEBSOCKETS) -> bool:
        return any(item.transport == transport for item in self.available_transports)


def _to_json_value(arg: Any) -> Any:
    if isinstance(arg, BaseModel):
        return arg.model_dump(mode="json", by_alias=True, exclude_none=True)
    return to_jsonable_python(arg)


def new_invocation_message(target: str, *args: Any, message_type: MessageType = MessageType.INVOCATION) -> InvocationMessage:
    """Build an invocation for `target`, converting each argument into a JSON value."""
    try:
        arguments = [_to_json_value(arg) for arg in args]
    except PydanticSerializationError as exc:
        raise ProtocolError(f"Argument for {target!r} is not JSON serializable: {exc}") from exc
    return InvocationMessage(type=normalize_type(message_type), target=target, arguments=arguments)


__all__ = [
    "HubModel",
    "InvocationMessage",
    "HandshakeRequest",
    "HandshakeResponse",
    "AvailableTransport",
    "NegotiateResponse",
    "new_invocation_message",
]
