"""Group application service for the groups bounded context.

Orchestrates group lifecycle and membership use cases. Each mutating use
case runs in one database transaction; domain events are drained after the
transaction commits.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from groups.application.observability import (
    DefaultGroupServiceProbe,
    GroupServiceProbe,
)
from groups.domain import permissions
from groups.domain.aggregates import UNSET, Group, Membership, Unset, User
from groups.domain.events import MembershipRequested
from groups.domain.exceptions import DuplicateMembershipError
from groups.domain.value_objects import GroupId, UserId
from groups.ports.exceptions import GroupHasSubgroupsError, GroupNotFoundError
from groups.ports.notifications import INotificationDispatcher
from groups.ports.repositories import (
    IDiscussionStore,
    IGroupRepository,
    IUserDirectory,
)
from infrastructure.settings import GroupSettings, get_group_settings


class GroupService:
    """Application service for group and membership management.

    Manages database transactions, resolves collaborators (parent groups,
    the system user, user emails) and isolates notification failures from
    the membership changes they accompany.
    """

    def __init__(
        self,
        session: AsyncSession,
        group_repository: IGroupRepository,
        user_directory: IUserDirectory,
        discussion_store: IDiscussionStore,
        notifier: INotificationDispatcher,
        settings: GroupSettings | None = None,
        probe: GroupServiceProbe | None = None,
    ):
        """Initialize GroupService with dependencies.

        Args:
            session: Database session for transaction management
            group_repository: Repository for group persistence
            user_directory: Lookup of users and the system account
            discussion_store: Discussion storage, used for cascading deletes
            notifier: Dispatcher for membership request notifications
            settings: Group policy settings (defaults from the environment)
            probe: Optional domain probe for observability
        """
        self._session = session
        self._group_repository = group_repository
        self._user_directory = user_directory
        self._discussion_store = discussion_store
        self._notifier = notifier
        self._settings = settings or get_group_settings()
        self._probe = probe or DefaultGroupServiceProbe()

    async def _load_group(
        self, group_id: GroupId, include_archived: bool = False
    ) -> Group:
        group = await self._group_repository.get_by_id(
            group_id, include_archived=include_archived
        )
        if group is None:
            raise GroupNotFoundError(f"Group {group_id.value} not found")
        return group

    async def _publish(self, group: Group) -> None:
        """Drain the aggregate's events and dispatch their side effects."""
        for event in group.collect_events():
            self._probe.event_published(
                event_type=type(event).__name__, group_id=group.id.value
            )
            if isinstance(event, MembershipRequested):
                await self._notify_membership_request(group, event)

    async def _notify_membership_request(
        self, group: Group, event: MembershipRequested
    ) -> None:
        membership = group.find_membership_or_request(UserId(value=event.user_id))
        if membership is None:
            return
        try:
            await self._notifier.notify_new_membership_request(group, membership)
        except Exception as e:
            # The request is already committed.
            self._probe.notification_failed(
                group_id=group.id.value,
                membership_id=event.membership_id,
                error=str(e),
            )

    async def create_group(
        self,
        name: str,
        creator_id: UserId | None,
        parent_id: GroupId | None = None,
        **attributes: Any,
    ) -> Group:
        """Create a new group with its creator as admin.

        Args:
            name: Group name
            creator_id: ID of user creating the group
            parent_id: Parent group for a subgroup
            **attributes: Optional group attributes (description,
                viewable_by, members_invitable_by, max_size,
                cannot_contribute, beta_features, sectors_metric)

        Returns:
            The created Group aggregate

        Raises:
            GroupNotFoundError: If the parent group does not exist
            GroupDomainError: If a hierarchy or attribute rule is violated
        """
        try:
            async with self._session.begin():
                parent = await self._load_group(parent_id) if parent_id else None
                system_user = await self._user_directory.get_system_user()

                group = Group.create(
                    name=name,
                    creator_id=creator_id,
                    parent=parent,
                    system_user_id=system_user.id if system_user else None,
                    default_max_size=self._settings.default_max_size,
                    **attributes,
                )
                await self._group_repository.save(group)

        except Exception as e:
            self._probe.group_creation_failed(
                name=name,
                parent_id=parent_id.value if parent_id else None,
                error=str(e),
            )
            raise

        self._probe.group_created(
            group_id=group.id.value,
            name=name,
            parent_id=parent_id.value if parent_id else None,
            creator_id=creator_id.value if creator_id else None,
        )
        await self._publish(group)
        return group

    async def update_group(
        self,
        group_id: GroupId,
        parent_id: GroupId | None | Unset = UNSET,
        **changes: Any,
    ) -> Group:
        """Update group attributes and, optionally, its parent.

        Args:
            group_id: The group to update
            parent_id: New parent, None to make the group a root group, or
                omitted to keep its placement
            **changes: New attribute values

        Returns:
            Updated Group aggregate

        Raises:
            GroupNotFoundError: If the group or the new parent does not exist
            GroupDomainError: If the result violates a rule (nothing is saved)
        """
        async with self._session.begin():
            group = await self._load_group(group_id)

            placement: dict[str, Any] = {}
            has_subgroups = False
            if not isinstance(parent_id, Unset):
                parent = await self._load_group(parent_id) if parent_id else None
                placement["parent"] = parent
                if parent is not None:
                    subgroups = await self._group_repository.list_subgroups(
                        group_id, include_archived=True
                    )
                    has_subgroups = bool(subgroups)

            changed = group.update(has_subgroups=has_subgroups, **placement, **changes)
            if changed:
                await self._group_repository.save(group)

        self._probe.group_updated(group_id=group_id.value, changed_fields=changed)
        await self._publish(group)
        return group

    async def archive_group(self, group_id: GroupId) -> Group:
        """Soft-delete a group so default lookups no longer return it.

        Raises:
            GroupNotFoundError: If the group does not exist or is already archived
        """
        async with self._session.begin():
            group = await self._load_group(group_id)
            group.archive()
            await self._group_repository.save(group)

        self._probe.group_archived(group_id=group_id.value)
        await self._publish(group)
        return group

    async def delete_group(self, group_id: GroupId) -> bool:
        """Hard-delete a group with its memberships and discussions.

        Everything is removed in a single transaction; if any step fails
        nothing is deleted.

        Args:
            group_id: The group to delete (archived groups included)

        Returns:
            True if deleted, False if not found

        Raises:
            GroupHasSubgroupsError: If other groups, archived or not, still have
                this group as parent
        """
        async with self._session.begin():
            group = await self._group_repository.get_by_id(
                group_id, include_archived=True
            )
            if group is None:
                return False

            subgroups = await self._group_repository.list_subgroups(
                group_id, include_archived=True
            )
            if subgroups:
                raise GroupHasSubgroupsError(
                    f"Group {group_id.value} still has {len(subgroups)} subgroup(s)"
                )

            group.mark_for_deletion()
            discussions_deleted = await self._discussion_store.delete_for_group(
                group_id
            )
            deleted = await self._group_repository.delete(group)

        if deleted:
            self._probe.group_deleted(
                group_id=group_id.value,
                memberships_deleted=len(group.memberships),
                discussions_deleted=discussions_deleted,
            )
        await self._publish(group)
        return deleted

    async def get_group(
        self, group_id: GroupId, include_archived: bool = False
    ) -> Group | None:
        """Get a hydrated group, or None if it does not exist."""
        return await self._group_repository.get_by_id(
            group_id, include_archived=include_archived
        )

    async def add_join_request(
        self, group_id: GroupId, user_id: UserId
    ) -> Membership | None:
        """Record a user's request to join a group.

        Nothing is recorded when the user is not eligible or already has a
        membership or request. Admins are notified once the request is
        committed; a failed notification is logged and otherwise ignored.

        Returns:
            The request-state membership, or None when the call was a no-op
        """
        async with self._session.begin():
            group = await self._load_group(group_id)
            membership = group.add_join_request(user_id)
            if membership is not None:
                await self._save_memberships(group, user_id)

        await self._publish(group)
        return membership

    async def add_member(
        self,
        group_id: GroupId,
        user_id: UserId,
        inviter_id: UserId | None = None,
        invitation_token: str | None = None,
    ) -> Membership:
        """Make a user a member of a group, idempotently.

        A new member added with an invitation token stays a pending
        invitation until accept_invitation is called.

        Raises:
            DuplicateMembershipError: If a concurrent writer created the
                membership first; retry to transition the existing row
        """
        async with self._session.begin():
            group = await self._load_group(group_id)
            membership = group.add_member(
                user_id, inviter_id=inviter_id, invitation_token=invitation_token
            )
            await self._save_memberships(group, user_id)

        await self._publish(group)
        return membership

    async def add_admin(self, group_id: GroupId, user_id: UserId) -> Membership:
        """Make a user an admin of a group, idempotently.

        Raises:
            DuplicateMembershipError: If a concurrent writer created the
                membership first; retry to transition the existing row
        """
        async with self._session.begin():
            group = await self._load_group(group_id)
            membership = group.add_admin(user_id)
            await self._save_memberships(group, user_id)

        await self._publish(group)
        return membership

    async def remove_membership(self, group_id: GroupId, user_id: UserId) -> Membership:
        """Remove a user's membership or request from a group.

        Raises:
            MembershipNotFoundError: If the user has no row in the group
        """
        async with self._session.begin():
            group = await self._load_group(group_id)
            membership = group.remove_membership(user_id)
            await self._group_repository.save(group)

        await self._publish(group)
        return membership

    async def accept_invitation(self, group_id: GroupId, user_id: UserId) -> Membership:
        """Mark a user's pending invitation as accepted.

        Raises:
            MembershipNotFoundError: If the user is not a member
        """
        async with self._session.begin():
            group = await self._load_group(group_id)
            membership = group.accept_invitation(user_id)
            await self._group_repository.save(group)

        return membership

    async def record_group_view(
        self,
        group_id: GroupId,
        user_id: UserId,
        viewed_at: datetime | None = None,
    ) -> Membership:
        """Stamp when a member last looked at the group's activity.

        Raises:
            MembershipNotFoundError: If the user is not a member
        """
        async with self._session.begin():
            group = await self._load_group(group_id)
            membership = group.record_group_view(user_id, viewed_at)
            await self._group_repository.save(group)

        return membership

    async def _save_memberships(self, group: Group, user_id: UserId) -> None:
        try:
            await self._group_repository.save(group)
        except DuplicateMembershipError:
            self._probe.duplicate_membership_detected(
                group_id=group.id.value, user_id=user_id.value
            )
            raise

    async def get_membership(
        self, group_id: GroupId, user_id: UserId
    ) -> Membership | None:
        """Get a user's member or admin membership in a group."""
        group = await self._group_repository.get_by_id(group_id)
        if group is None:
            return None
        return group.membership(user_id)

    async def user_can_join(self, group_id: GroupId, user_id: UserId) -> bool:
        """Check if a user may request to join a group."""
        group = await self._load_group(group_id)
        return group.user_can_join(user_id)

    async def has_admin_user(self, group_id: GroupId, user_id: UserId) -> bool:
        """Check if a user has admin authority over a group (directly or via its parent)."""
        group = await self._load_group(group_id)
        return group.has_admin_user(user_id)

    async def admin_email(self, group_id: GroupId) -> str:
        """Resolve the contact address of a group.

        Returns:
            The first admin's email, else the creator's, else the
            configured fallback address
        """
        group = await self._load_group(group_id, include_archived=True)

        admins: list[User] = []
        for membership in group.admin_memberships():
            user = await self._user_directory.get_by_id(membership.user_id)
            if user is not None:
                admins.append(user)
                break

        creator = None
        if not admins and group.creator_id is not None:
            creator = await self._user_directory.get_by_id(group.creator_id)

        return permissions.admin_email(
            admins, creator, fallback=self._settings.fallback_admin_email
        )

    async def full_name(self, group_id: GroupId) -> str:
        """Resolve a group's display name using the configured separator."""
        group = await self._load_group(group_id, include_archived=True)
        return group.full_name(self._settings.name_separator)

    async def parent_members_visible_to(
        self, group_id: GroupId, user_id: UserId | None
    ) -> list[User]:
        """List the parent group's members a user may add to a subgroup.

        Returns:
            Users sorted by name; pending invitations are included only for
            users allowed to invite members into the parent
        """
        group = await self._load_group(group_id)

        users: list[User] = []
        for member_id in group.parent_members_visible_to(user_id):
            user = await self._user_directory.get_by_id(member_id)
            if user is not None:
                users.append(user)
        return sorted(users, key=lambda user: user.name.lower())
