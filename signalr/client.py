from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Union

from signalr.config import CLIENT_CONFIG, validate_config
from signalr.connection_string import parse_connection_string
from signalr.core.context import Context
from signalr.core.network import HubConnection
from signalr.core.session import HubSession
from signalr.features.groups import GroupManager
from signalr.features.messaging import MessagingManager
from signalr.protocol.errors import ConfigError
from signalr.protocol.message_types import AudienceType
from signalr.protocol.messages import InvocationMessage, NegotiateResponse

logger = logging.getLogger(__name__)


class Client:
    """
    Addressable endpoint on a hub.

    `listen` keeps one websocket open and dispatches invocations to a handler; the send
    and group methods are independent REST calls that may run concurrently with it.
    """

    def __init__(
        self,
        connection_string: str,
        hub: str,
        name: Optional[str] = None,
        audience: Union[str, AudienceType] = AudienceType.CLIENT,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.config = config or CLIENT_CONFIG
        validate_config(self.config)
        self.connection = parse_connection_string(connection_string)
        self.session = HubSession(
            self.connection,
            hub,
            name=name,
            audience=audience,
            token_ttl=int(self.config["token_ttl"]),
            http_timeout=float(self.config["http_timeout"]),
        )
        self.messaging = MessagingManager(self.session)
        self.groups = GroupManager(self.session)

    @classmethod
    def from_env(cls, hub: str, **kwargs: Any) -> "Client":
        """Build a client from the configured `connection_string` (see `load_config`)."""
        config = kwargs.pop("config", None) or CLIENT_CONFIG
        connection_string = config.get("connection_string")
        if not connection_string:
            raise ConfigError("SIGNALR_CONNECTION_STRING is not set")
        return cls(connection_string, hub, config=config, **kwargs)

    @property
    def name(self) -> str:
        return self.session.name

    @property
    def hub(self) -> str:
        return self.session.hub

    @property
    def negotiated(self) -> Optional[NegotiateResponse]:
        return self.session.negotiated

    async def negotiate(self) -> NegotiateResponse:
        return await self.session.negotiate_once()

    async def listen(self, handler: Any, ctx: Optional[Context] = None) -> None:
        """Listen until `ctx` is cancelled (clean return) or the connection fails (raises)."""
        connection = HubConnection(self.session, read_timeout=float(self.config["read_timeout"]))
        await connection.listen(handler, ctx)

    async def send_invocation(self, uri: str, msg: InvocationMessage) -> None:
        await self.messaging.send_invocation(uri, msg)

    async def broadcast_all(self, msg: InvocationMessage) -> None:
        await self.messaging.broadcast_all(msg)

    async def broadcast_group(self, msg: InvocationMessage, group: str) -> None:
        await self.messaging.broadcast_group(msg, group)

    async def broadcast_groups(self, msg: InvocationMessage, groups: Sequence[str]) -> None:
        await self.messaging.broadcast_groups(msg, groups)

    async def send_to_user(self, msg: InvocationMessage, user_id: str) -> None:
        await self.messaging.send_to_user(msg, user_id)

    async def send_to_users(self, msg: InvocationMessage, user_ids: Sequence[str]) -> None:
        await self.messaging.send_to_users(msg, user_ids)

    async def add_user_to_group(self, group: str, user_id: str) -> None:
        await self.groups.add_user_to_group(group, user_id)

    async def remove_user_from_group(self, group: str, user_id: str) -> None:
        await self.groups.remove_user_from_group(group, user_id)

    async def remove_user_from_all_groups(self, user_id: str) -> None:
        await self.groups.remove_user_from_all_groups(user_id)


__all__ = ["Client"]
