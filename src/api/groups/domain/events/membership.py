"""Membership domain events.

Domain events related to a user's relationship to a group.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MembershipRequested:
    """Event raised when a user asks to join a group.

    This event drives the "new membership request" notification.

    Attributes:
        group_id: The ULID of the group
        membership_id: The ULID of the request-state membership
        user_id: The ULID of the requesting user
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    membership_id: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class MemberAdded:
    """Event raised when a new membership row is created directly at member or admin level.

    Attributes:
        group_id: The ULID of the group
        membership_id: The ULID of the new membership
        user_id: The ULID of the user
        access_level: The level the membership was created at
        inviter_id: The ULID of the inviting user, if any
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    membership_id: str
    user_id: str
    access_level: str
    inviter_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class MembershipAccessLevelChanged:
    """Event raised when an existing membership is promoted.

    Attributes:
        group_id: The ULID of the group
        membership_id: The ULID of the membership
        user_id: The ULID of the user
        old_access_level: The previous level
        new_access_level: The new level
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    membership_id: str
    user_id: str
    old_access_level: str
    new_access_level: str
    occurred_at: datetime


@dataclass(frozen=True)
class MembershipRemoved:
    """Event raised when a user leaves or is removed from a group."""

    group_id: str
    membership_id: str
    user_id: str
    access_level: str
    occurred_at: datetime
