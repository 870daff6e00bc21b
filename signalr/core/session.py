from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional, Sequence, Union
from urllib.parse import quote

import jwt

from signalr.connection_string import ParsedConnectionString
from signalr.protocol import validator
from signalr.protocol.constants import API_VERSION_PATH, DEFAULT_HTTP_TIMEOUT, DEFAULT_TOKEN_TTL
from signalr.protocol.errors import AuthError, NegotiationError, ProtocolError, SendFailureError
from signalr.protocol.message_types import AudienceType, TransportType
from signalr.protocol.messages import NegotiateResponse
from signalr.utils.common import generate_client_name, utc_timestamp

from .transport import http_request

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


def _segment(value: str) -> str:
    return quote(value, safe="")


def _join_segments(values: Sequence[str]) -> str:
    return ",".join(_segment(value) for value in values)


class HubSession:
    """Holds client identity, builds service URIs, mints tokens and caches the negotiation."""

    def __init__(
        self,
        connection: ParsedConnectionString,
        hub: str,
        name: Optional[str] = None,
        audience: Union[str, AudienceType] = AudienceType.CLIENT,
        token_ttl: int = DEFAULT_TOKEN_TTL,
        http_timeout: Optional[float] = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self.endpoint: str = connection.endpoint
        self.key: str = connection.key
        self.hub: str = hub
        self.name: str = name or generate_client_name()
        self.audience: AudienceType = AudienceType(audience)
        self.token_ttl: int = int(token_ttl)
        self.http_timeout = http_timeout
        self._negotiate_lock = asyncio.Lock()
        self._negotiated: Optional[NegotiateResponse] = None

    # URIs

    def audience_uri(self) -> str:
        return f"{self.endpoint}/{self.audience.value}/?hub={self.hub.lower()}"

    def negotiate_uri(self) -> str:
        return f"{self.endpoint}/{self.audience.value}/negotiate?hub={_segment(self.hub)}"

    def websocket_uri(self) -> str:
        negotiated = self.negotiated
        if negotiated is None:
            raise NegotiationError("websocket URI requested before negotiation")
        base = self.audience_uri()
        if base.startswith("https://"):
            base = "wss://" + base[len("https://"):]
        elif base.startswith("http://"):
            base = "ws://" + base[len("http://"):]
        return f"{base}&id={negotiated.connection_id}"

    def base_uri(self) -> str:
        return f"{self.endpoint}/{API_VERSION_PATH}/hubs/{self.hub.lower()}"

    def group_uri(self, group: str) -> str:
        return f"{self.base_uri()}/groups/{_segment(group)}"

    def groups_uri(self, groups: Sequence[str]) -> str:
        return f"{self.base_uri()}/groups/{_join_segments(groups)}"

    def user_uri(self, user_id: str) -> str:
        return f"{self.base_uri()}/users/{_segment(user_id)}"

    def users_uri(self, user_ids: Sequence[str]) -> str:
        return f"{self.base_uri()}/users/{_join_segments(user_ids)}"

    def group_user_uri(self, group: str, user_id: str) -> str:
        return f"{self.group_uri(group)}/users/{_segment(user_id)}"

    def user_groups_uri(self, user_id: str) -> str:
        return f"{self.user_uri(user_id)}/groups"

    # Tokens

    def generate_token(self, audience: str, ttl: Optional[int] = None) -> str:
        """Sign a fresh HS256 token scoped to `audience`; never cached or reused."""
        if not self.key:
            raise AuthError("cannot sign token: access key is empty")
        now = utc_timestamp()
        claims = {
            "iat": now,
            "nbf": now,
            "aud": audience,
            "exp": now + int(ttl if ttl is not None else self.token_ttl),
            "nameid": self.name,
        }
        try:
            return jwt.encode(claims, self.key, algorithm=TOKEN_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise AuthError(f"cannot sign token: {exc}") from exc

    # Negotiation

    @property
    def negotiated(self) -> Optional[NegotiateResponse]:
        return self._negotiated

    def reset_negotiation(self) -> None:
        self._negotiated = None

    async def negotiate_once(self) -> NegotiateResponse:
        """Negotiate at most once per session; concurrent callers share the single request."""
        async with self._negotiate_lock:
            if self._negotiated is None:
                response = await self._negotiate()
                if not response.supports(TransportType.WEBSOCKETS):
                    raise NegotiationError("WebSockets transport is not supported by the service")
                self._negotiated = response
                logger.info("Negotiated connection %s for hub %s", response.connection_id, self.hub)
            return self._negotiated

    async def _negotiate(self) -> NegotiateResponse:
        uri = self.negotiate_uri()
        token = self.generate_token(self.audience_uri())
        status, body = await http_request("POST", uri, token, timeout=self.http_timeout)
        if status > 399:
            raise SendFailureError(status, body)

        try:
            doc = json.loads(body)
            if not isinstance(doc, dict):
                raise NegotiationError(f"negotiate response is not a JSON object: {body!r}")
            validator.validate_negotiate(doc)
            response = NegotiateResponse.from_dict(doc)
        except (json.JSONDecodeError, ProtocolError) as exc:
            raise NegotiationError(f"malformed negotiate response: {exc}") from exc

        if not response.connection_id:
            raise NegotiationError("negotiate response carried no connectionId")
        return response


__all__ = ["HubSession", "TOKEN_ALGORITHM"]
