"""Ports (interfaces) for the groups bounded context.

Ports define the contracts for repositories and collaborators without
specifying implementation details. This allows for dependency inversion
and makes the domain layer independent of infrastructure.
"""

from groups.ports.exceptions import GroupHasSubgroupsError, GroupNotFoundError
from groups.ports.notifications import INotificationDispatcher
from groups.ports.repositories import (
    IDiscussionStore,
    IGroupRepository,
    IReadLogStore,
    IUserDirectory,
)

__all__ = [
    "IDiscussionStore",
    "IGroupRepository",
    "INotificationDispatcher",
    "IReadLogStore",
    "IUserDirectory",
    "GroupHasSubgroupsError",
    "GroupNotFoundError",
]
