"""Repository and collaborator protocols (ports) for the groups context.

The group repository persists Group aggregates together with their
memberships. The remaining ports describe collaborators owned by the
embedding system: the user directory, the discussion store and the
read-log store.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from groups.domain.aggregates import Group, User
from groups.domain.value_objects import (
    CommentSummary,
    DiscussionId,
    DiscussionSummary,
    GroupId,
    ReadLogEntry,
    UserId,
)


@runtime_checkable
class IGroupRepository(Protocol):
    """Repository for Group aggregate persistence.

    Returns fully hydrated Group aggregates: memberships are loaded, and a
    subgroup's parent is loaded one level deep with its own memberships.
    Archived groups are hidden unless explicitly requested.
    """

    async def save(self, group: Group) -> None:
        """Persist a group aggregate and sync its memberships.

        Args:
            group: The Group aggregate to persist

        Raises:
            DuplicateMembershipError: If a concurrent writer created a
                membership for the same group and user first
        """
        ...

    async def get_by_id(
        self, group_id: GroupId, include_archived: bool = False
    ) -> Group | None:
        """Retrieve a group by its ID.

        Args:
            group_id: The unique identifier of the group
            include_archived: Also return archived groups

        Returns:
            The hydrated Group aggregate, or None if not found
        """
        ...

    async def list_subgroups(
        self, group_id: GroupId, include_archived: bool = False
    ) -> list[Group]:
        """List the subgroups of a group.

        Archived subgroups are excluded unless include_archived is True.
        Hierarchy checks must include them, since they still reference the
        parent.

        Args:
            group_id: The parent group
            include_archived: Also return archived subgroups

        Returns:
            Subgroup aggregates (parents not hydrated)
        """
        ...

    async def delete(self, group: Group) -> bool:
        """Delete a group together with its memberships.

        Args:
            group: The Group aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class IUserDirectory(Protocol):
    """Lookup of users owned by the embedding system."""

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by ID, or None if unknown."""
        ...

    async def get_system_user(self) -> User | None:
        """Return the reserved system/bot account, if the system has one."""
        ...


@runtime_checkable
class IDiscussionStore(Protocol):
    """Discussion and comment facts for a group."""

    async def list_for_group(self, group_id: GroupId) -> list[DiscussionSummary]:
        """List the discussions of a group with their timestamps."""
        ...

    async def list_comments_for_group(self, group_id: GroupId) -> list[CommentSummary]:
        """List the comments posted on any discussion of a group."""
        ...

    async def delete_for_group(self, group_id: GroupId) -> int:
        """Delete every discussion of a group.

        Runs inside the caller's unit of work.

        Returns:
            Number of discussions deleted
        """
        ...


@runtime_checkable
class IReadLogStore(Protocol):
    """Per-user, per-discussion read records."""

    async def list_for_user(
        self, user_id: UserId, discussion_ids: list[DiscussionId]
    ) -> list[ReadLogEntry]:
        """List the user's read logs for the given discussions."""
        ...
