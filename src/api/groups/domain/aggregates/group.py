"""Group aggregate for the groups context."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from groups.domain import hierarchy, permissions
from groups.domain.aggregates.membership import Membership
from groups.domain.events import (
    GroupArchived,
    GroupCreated,
    GroupDeleted,
    GroupUpdated,
    MemberAdded,
    MembershipAccessLevelChanged,
    MembershipRemoved,
    MembershipRequested,
    MembershipSnapshot,
)
from groups.domain.exceptions import DuplicateMembershipError, MembershipNotFoundError
from groups.domain.observability.group_probe import DefaultGroupProbe, GroupProbe
from groups.domain.value_objects import (
    AccessLevel,
    GroupId,
    PermissionCategory,
    UserId,
)

if TYPE_CHECKING:
    from groups.domain.events import DomainEvent


class Unset:
    """Marker for "argument not given" where None is meaningful."""


UNSET = Unset()

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "viewable_by",
        "members_invitable_by",
        "max_size",
        "cannot_contribute",
        "beta_features",
        "sectors_metric",
    }
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Group:
    """Group aggregate owning its memberships.

    Groups form a two-level hierarchy: a root group may have subgroups, and
    a subgroup may not have subgroups of its own. The parent, when present,
    is hydrated one level deep (with its memberships but without a parent
    of its own) so that inherited rules can be resolved.

    Business rules:
    - A parent never has a parent itself
    - Root groups have a max_size, subgroups never do
    - viewable_by and members_invitable_by are always set after construction
    - At most one membership per user
    - Membership promotion is monotonic (request -> member -> admin)
    - The creator becomes admin unless it is the system user

    Event collection:
    - All mutating operations record domain events
    - Events can be collected via collect_events()
    """

    id: GroupId
    name: str
    creator_id: UserId | None = None
    description: str | None = None
    parent_id: GroupId | None = None
    viewable_by: PermissionCategory | None = None
    members_invitable_by: PermissionCategory | None = None
    max_size: int | None = None
    cannot_contribute: bool = False
    beta_features: bool = False
    sectors_metric: list[str] = field(default_factory=list)
    archived_at: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
    memberships: list[Membership] = field(default_factory=list)
    parent: Group | None = field(default=None, repr=False, compare=False)
    _pending_events: list[DomainEvent] = field(default_factory=list, repr=False)
    _probe: GroupProbe = field(
        default_factory=DefaultGroupProbe,
        repr=False,
        compare=False,
    )

    def __post_init__(self) -> None:
        """Link the hydrated parent and fill permission defaults."""
        if self.parent is not None and self.parent_id is None:
            self.parent_id = self.parent.id
        self.apply_defaults()

    def apply_defaults(self, default_max_size: int | None = None) -> None:
        """Fill unset fields with their hierarchy-dependent defaults.

        Explicit values are parsed but never overwritten, so applying the
        defaults again is a no-op.

        Args:
            default_max_size: When given, also fill max_size of a root group

        Raises:
            InvalidPermissionCategoryError: If a category value is not recognised
        """
        if self.viewable_by is None:
            self.viewable_by = permissions.default_viewable_by(self.parent_id)
        else:
            self.viewable_by = PermissionCategory.parse(self.viewable_by)

        if self.members_invitable_by is None:
            self.members_invitable_by = permissions.default_members_invitable_by()
        else:
            self.members_invitable_by = PermissionCategory.parse(
                self.members_invitable_by
            )

        if default_max_size is not None:
            self.max_size = permissions.default_max_size(
                self.parent_id, self.max_size, default=default_max_size
            )

    @classmethod
    def create(
        cls,
        name: str,
        creator_id: UserId | None,
        parent: Group | None = None,
        description: str | None = None,
        viewable_by: PermissionCategory | str | None = None,
        members_invitable_by: PermissionCategory | str | None = None,
        max_size: int | None = None,
        cannot_contribute: bool = False,
        beta_features: bool = False,
        sectors_metric: list[str] | None = None,
        system_user_id: UserId | None = None,
        default_max_size: int = permissions.DEFAULT_MAX_SIZE,
        probe: GroupProbe | None = None,
    ) -> "Group":
        """Factory method for creating a new group.

        Applies defaults, validates the hierarchy and attribute rules,
        records GroupCreated and grants the creator admin.

        Args:
            name: The group name (1-250 characters)
            creator_id: The creating user
            parent: The parent group for a subgroup
            description: Optional description (up to 250 characters)
            viewable_by: Visibility category, defaulted from the hierarchy
            members_invitable_by: Invite-rights category, defaults to members
            max_size: Size limit, required for root groups (defaulted)
            cannot_contribute: Whether members are read-only
            beta_features: The group's own beta flag
            sectors_metric: Ordered sector tags
            system_user_id: The reserved bot account, never made admin
            default_max_size: Size limit applied to root groups without one
            probe: Optional observability probe for domain events

        Returns:
            A new Group aggregate with GroupCreated event recorded

        Raises:
            GroupDomainError: If any hierarchy or attribute rule is violated
        """
        group = cls(
            id=GroupId.generate(),
            name=name,
            creator_id=creator_id,
            description=description,
            parent_id=parent.id if parent is not None else None,
            viewable_by=viewable_by,
            members_invitable_by=members_invitable_by,
            max_size=max_size,
            cannot_contribute=cannot_contribute,
            beta_features=beta_features,
            sectors_metric=list(sectors_metric or []),
            parent=parent,
            _probe=probe or DefaultGroupProbe(),
        )
        group.apply_defaults(default_max_size=default_max_size)
        hierarchy.validate_group(group, parent)

        group._pending_events.append(
            GroupCreated(
                group_id=group.id.value,
                parent_id=group.parent_id.value if group.parent_id else None,
                creator_id=creator_id.value if creator_id else None,
                occurred_at=group.created_at,
            )
        )

        if creator_id is not None and creator_id != system_user_id:
            group.add_admin(creator_id)
        else:
            group._probe.creator_admin_skipped(
                group_id=group.id.value,
                creator_id=creator_id.value if creator_id else None,
            )
        return group

    def update(
        self,
        parent: Group | None | Unset = UNSET,
        has_subgroups: bool = False,
        **changes: Any,
    ) -> tuple[str, ...]:
        """Change group attributes and optionally move it in the hierarchy.

        The changes are validated on a candidate copy first, so a failure
        leaves the aggregate untouched.

        Args:
            parent: New parent group, None to make this a root group, or
                omitted to keep the current placement
            has_subgroups: Whether other groups currently point at this group
            **changes: New values for any of UPDATABLE_FIELDS

        Returns:
            Names of the fields that actually changed

        Raises:
            TypeError: If a change names a field that cannot be updated
            GroupDomainError: If the resulting group violates a rule
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update group fields: {', '.join(sorted(unknown))}")

        new_parent = self.parent if isinstance(parent, Unset) else parent
        if "sectors_metric" in changes:
            changes["sectors_metric"] = list(changes["sectors_metric"] or [])

        candidate = replace(
            self,
            parent_id=new_parent.id if new_parent is not None else None,
            parent=new_parent,
            **changes,
        )
        hierarchy.validate_group(candidate, new_parent, has_subgroups=has_subgroups)

        changed = tuple(
            name
            for name in sorted(UPDATABLE_FIELDS | {"parent_id"})
            if getattr(candidate, name) != getattr(self, name)
        )
        for name in changed:
            setattr(self, name, getattr(candidate, name))
        self.parent = new_parent

        if changed:
            self.updated_at = _utc_now()
            self._pending_events.append(
                GroupUpdated(
                    group_id=self.id.value,
                    changed_fields=changed,
                    occurred_at=self.updated_at,
                )
            )
        return changed

    #
    # Permission resolution
    #

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_subgroup(self) -> bool:
        return self.parent_id is not None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @property
    def has_beta_features(self) -> bool:
        """Own beta flag, or the parent's for a subgroup."""
        return permissions.effective_beta_features(self, self.parent)

    @property
    def size_limit(self) -> int | None:
        """Size limit in force (the parent's for a subgroup)."""
        return permissions.effective_max_size(self, self.parent)

    def full_name(self, separator: str = permissions.DEFAULT_NAME_SEPARATOR) -> str:
        return permissions.full_name(self, self.parent, separator)

    def root_name(self) -> str:
        return permissions.root_name(self, self.parent)

    def has_admin_user(self, user_id: UserId) -> bool:
        """Check if a user is an admin here or in the parent group."""
        return permissions.has_admin_user(self, self.parent, user_id)

    def user_can_join(self, user_id: UserId) -> bool:
        """Check if a user is eligible to request membership."""
        return permissions.user_can_join(self, self.parent, user_id)

    def can_view(self, user_id: UserId | None) -> bool:
        return permissions.can_view(self, self.parent, user_id)

    def can_invite_members(self, user_id: UserId | None) -> bool:
        return permissions.can_invite_members(self, self.parent, user_id)

    def parent_members_visible_to(self, user_id: UserId | None) -> list[UserId]:
        """Parent members a user may see when adding people to this subgroup."""
        return permissions.parent_members_visible_to(self, self.parent, user_id)

    #
    # Membership queries
    #

    def membership(self, user_id: UserId) -> Membership | None:
        """Get a user's member or admin membership.

        Pending requests are not memberships in this sense.

        Args:
            user_id: The user to look up

        Returns:
            The membership, or None if the user is not a member
        """
        for membership in self.memberships:
            if membership.user_id == user_id and membership.is_member_level:
                return membership
        return None

    def find_membership_or_request(self, user_id: UserId) -> Membership | None:
        """Get a user's membership row whatever its access level."""
        for membership in self.memberships:
            if membership.user_id == user_id:
                return membership
        return None

    def find_or_build_membership_for_user(self, user_id: UserId) -> Membership:
        """Return the user's existing row, or stage a new unattached request.

        This is the entry point for every transition: the staged membership
        is only attached to the group once it has been transitioned.
        """
        existing = self.find_membership_or_request(user_id)
        if existing is not None:
            return existing
        return Membership.build(group_id=self.id, user_id=user_id)

    def is_admin(self, user_id: UserId) -> bool:
        return any(m.user_id == user_id and m.is_admin for m in self.memberships)

    def members(self) -> list[Membership]:
        """Member and admin rows, excluding requests."""
        return [m for m in self.memberships if m.is_member_level]

    def membership_requests(self) -> list[Membership]:
        return [m for m in self.memberships if m.is_request]

    def users(self) -> list[UserId]:
        """Members and admins, excluding pending invitations."""
        return [m.user_id for m in self.members() if not m.is_pending_invitation]

    def invited_users(self) -> list[UserId]:
        return [m.user_id for m in self.members() if m.is_pending_invitation]

    def users_and_invited_users(self) -> list[UserId]:
        return [m.user_id for m in self.members()]

    def requested_users(self) -> list[UserId]:
        return [m.user_id for m in self.membership_requests()]

    def admin_memberships(self) -> list[Membership]:
        """Admin rows in the group's admin ordering (oldest first)."""
        return sorted(
            (m for m in self.memberships if m.is_admin),
            key=lambda m: m.created_at,
        )

    #
    # Membership mutations
    #

    def add_join_request(self, user_id: UserId) -> Membership | None:
        """Ask to join the group.

        A request is only recorded when the user is eligible to join and
        has no membership or request here yet; otherwise this is a no-op.

        Args:
            user_id: The requesting user

        Returns:
            The new request-state membership, or None if nothing was recorded
        """
        if not self.user_can_join(user_id):
            self._probe.join_request_ignored(
                group_id=self.id.value, user_id=user_id.value, reason="not_eligible"
            )
            return None
        if self.find_membership_or_request(user_id) is not None:
            self._probe.join_request_ignored(
                group_id=self.id.value, user_id=user_id.value, reason="already_exists"
            )
            return None

        membership = Membership.build(group_id=self.id, user_id=user_id)
        self._attach(membership)

        self._pending_events.append(
            MembershipRequested(
                group_id=self.id.value,
                membership_id=membership.id.value,
                user_id=user_id.value,
                occurred_at=membership.created_at,
            )
        )
        self._probe.membership_requested(group_id=self.id.value, user_id=user_id.value)
        return membership

    def add_member(
        self,
        user_id: UserId,
        inviter_id: UserId | None = None,
        invitation_token: str | None = None,
    ) -> Membership:
        """Make a user a member, idempotently.

        Requests are promoted, new users get a member row, and existing
        members or admins are left as they are.

        Args:
            user_id: The user to add
            inviter_id: The user granting membership, if any
            invitation_token: Marks a new row as a pending invitation until
                accepted; ignored for users who already have a row

        Returns:
            The user's membership
        """
        membership = self.find_or_build_membership_for_user(user_id)
        if invitation_token is not None and all(
            m is not membership for m in self.memberships
        ):
            membership.invitation_token = invitation_token
        old_level = membership.access_level
        changed = membership.promote_to_member(inviter_id)
        self._record_transition(membership, old_level, changed)
        return membership

    def add_admin(self, user_id: UserId) -> Membership:
        """Make a user an admin, idempotently.

        Args:
            user_id: The user to promote or add

        Returns:
            The user's membership
        """
        membership = self.find_or_build_membership_for_user(user_id)
        old_level = membership.access_level
        changed = membership.make_admin()
        self._record_transition(membership, old_level, changed)
        return membership

    def remove_membership(self, user_id: UserId) -> Membership:
        """Destroy a user's membership or request (leaving or removal).

        Raises:
            MembershipNotFoundError: If the user has no row in this group
        """
        membership = self.find_membership_or_request(user_id)
        if membership is None:
            raise MembershipNotFoundError(
                f"User {user_id} has no membership in group {self.id}"
            )

        self.memberships = [m for m in self.memberships if m is not membership]

        self._pending_events.append(
            MembershipRemoved(
                group_id=self.id.value,
                membership_id=membership.id.value,
                user_id=user_id.value,
                access_level=membership.access_level.value,
                occurred_at=_utc_now(),
            )
        )
        self._probe.membership_removed(
            group_id=self.id.value,
            user_id=user_id.value,
            access_level=membership.access_level.value,
        )
        return membership

    def accept_invitation(self, user_id: UserId) -> Membership:
        """Turn the user's pending invitation into an accepted membership.

        Accepting twice is a no-op.

        Raises:
            MembershipNotFoundError: If the user is not a member
        """
        membership = self.membership(user_id)
        if membership is None:
            raise MembershipNotFoundError(
                f"User {user_id} is not a member of group {self.id}"
            )
        membership.accept_invitation()
        return membership

    def record_group_view(
        self, user_id: UserId, viewed_at: datetime | None = None
    ) -> Membership:
        """Stamp the member's group_last_viewed_at.

        Raises:
            MembershipNotFoundError: If the user is not a member
        """
        membership = self.membership(user_id)
        if membership is None:
            raise MembershipNotFoundError(
                f"User {user_id} is not a member of group {self.id}"
            )
        membership.mark_group_viewed(viewed_at or _utc_now())
        return membership

    def _record_transition(
        self, membership: Membership, old_level: AccessLevel, changed: bool
    ) -> None:
        is_new = all(m is not membership for m in self.memberships)
        if is_new:
            self._attach(membership)
            self._pending_events.append(
                MemberAdded(
                    group_id=self.id.value,
                    membership_id=membership.id.value,
                    user_id=membership.user_id.value,
                    access_level=membership.access_level.value,
                    inviter_id=(
                        membership.inviter_id.value if membership.inviter_id else None
                    ),
                    occurred_at=membership.created_at,
                )
            )
            self._probe.member_added(
                group_id=self.id.value,
                user_id=membership.user_id.value,
                access_level=membership.access_level.value,
            )
        elif changed:
            self._pending_events.append(
                MembershipAccessLevelChanged(
                    group_id=self.id.value,
                    membership_id=membership.id.value,
                    user_id=membership.user_id.value,
                    old_access_level=old_level.value,
                    new_access_level=membership.access_level.value,
                    occurred_at=_utc_now(),
                )
            )
            self._probe.access_level_changed(
                group_id=self.id.value,
                user_id=membership.user_id.value,
                old_access_level=old_level.value,
                new_access_level=membership.access_level.value,
            )

    def _attach(self, membership: Membership) -> None:
        if self.find_membership_or_request(membership.user_id) is not None:
            raise DuplicateMembershipError(
                f"User {membership.user_id} already has a membership in group {self.id}"
            )
        self.memberships.append(membership)

    #
    # Lifecycle
    #

    def archive(self, archived_at: datetime | None = None) -> None:
        """Soft-delete the group. Archiving twice keeps the first timestamp."""
        if self.archived_at is not None:
            return
        self.archived_at = archived_at or _utc_now()
        self._pending_events.append(
            GroupArchived(group_id=self.id.value, occurred_at=self.archived_at)
        )

    def mark_for_deletion(self) -> None:
        """Record the GroupDeleted event with a snapshot of all memberships."""
        snapshot = tuple(
            MembershipSnapshot(
                membership_id=m.id.value,
                user_id=m.user_id.value,
                access_level=m.access_level.value,
            )
            for m in self.memberships
        )
        self._pending_events.append(
            GroupDeleted(
                group_id=self.id.value,
                parent_id=self.parent_id.value if self.parent_id else None,
                memberships=snapshot,
                occurred_at=_utc_now(),
            )
        )

    def collect_events(self) -> list[DomainEvent]:
        """Return and clear pending domain events.

        Returns:
            List of pending domain events
        """
        events = self._pending_events.copy()
        self._pending_events.clear()
        return events
