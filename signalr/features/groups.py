from __future__ import annotations

from signalr.core.session import HubSession

from .messaging import send_request


class GroupManager:
    """Group membership over the REST API."""

    def __init__(self, session: HubSession) -> None:
        self.session = session

    async def add_user_to_group(self, group: str, user_id: str) -> None:
        await send_request(self.session, "PUT", self.session.group_user_uri(group, user_id))

    async def remove_user_from_group(self, group: str, user_id: str) -> None:
        await send_request(self.session, "DELETE", self.session.group_user_uri(group, user_id))

    async def remove_user_from_all_groups(self, user_id: str) -> None:
        await send_request(self.session, "DELETE", self.session.user_groups_uri(user_id))


__all__ = ["GroupManager"]
