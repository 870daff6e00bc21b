from __future__ import annotations

import logging
from typing import Optional, Sequence

from signalr.core.session import HubSession
from signalr.core.transport import http_request
from signalr.protocol import framing
from signalr.protocol.constants import ENCODING
from signalr.protocol.errors import SendFailureError
from signalr.protocol.messages import InvocationMessage

logger = logging.getLogger(__name__)


async def send_request(session: HubSession, method: str, uri: str, body: Optional[bytes] = None) -> None:
    """Authenticated REST call scoped to `uri`; a status above 399 raises SendFailureError."""
    token = session.generate_token(uri)
    status, text = await http_request(method, uri, token, body=body, timeout=session.http_timeout)
    if status > 399:
        raise SendFailureError(status, text)
    logger.debug("%s %s succeeded with %s", method, uri, status)


class MessagingManager:
    """Outbound invocations over the REST API: broadcast, groups, users."""

    def __init__(self, session: HubSession) -> None:
        self.session = session

    async def send_invocation(self, uri: str, msg: InvocationMessage) -> None:
        body = framing.encode_json(msg.to_wire()).encode(ENCODING)
        await send_request(self.session, "POST", uri, body)

    async def broadcast_all(self, msg: InvocationMessage) -> None:
        await self.send_invocation(self.session.base_uri(), msg)

    async def broadcast_group(self, msg: InvocationMessage, group: str) -> None:
        await self.send_invocation(self.session.group_uri(group), msg)

    async def broadcast_groups(self, msg: InvocationMessage, groups: Sequence[str]) -> None:
        await self.send_invocation(self.session.groups_uri(groups), msg)

    async def send_to_user(self, msg: InvocationMessage, user_id: str) -> None:
        await self.send_invocation(self.session.user_uri(user_id), msg)

    async def send_to_users(self, msg: InvocationMessage, user_ids: Sequence[str]) -> None:
        await self.send_invocation(self.session.users_uri(user_ids), msg)


__all__ = ["MessagingManager", "send_request"]
