"""Group lifecycle domain events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MembershipSnapshot:
    """Immutable snapshot of a membership at a point in time.

    Used in GroupDeleted to capture the memberships that are destroyed
    together with the group.

    Attributes:
        membership_id: The ULID of the membership
        user_id: The ULID of the user
        access_level: The access level the user held
    """

    membership_id: str
    user_id: str
    access_level: str


@dataclass(frozen=True)
class GroupCreated:
    """Event raised when a new group is created.

    Attributes:
        group_id: The ULID of the created group
        parent_id: The ULID of the parent group, if this is a subgroup
        creator_id: The ULID of the creating user, if known
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    parent_id: str | None
    creator_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class GroupUpdated:
    """Event raised when group attributes change.

    Attributes:
        group_id: The ULID of the group
        changed_fields: Names of the attributes that changed
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    changed_fields: tuple[str, ...]
    occurred_at: datetime


@dataclass(frozen=True)
class GroupArchived:
    """Event raised when a group is soft-deleted."""

    group_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class GroupDeleted:
    """Event raised when a group is hard-deleted.

    Carries a snapshot of the memberships removed in the same unit of work.
    """

    group_id: str
    parent_id: str | None
    memberships: tuple[MembershipSnapshot, ...]
    occurred_at: datetime
