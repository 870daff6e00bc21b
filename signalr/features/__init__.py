from .groups import GroupManager
from .messaging import MessagingManager, send_request

__all__ = ["GroupManager", "MessagingManager", "send_request"]
