"""Membership entity for the groups context.

A membership is owned by its Group aggregate; it is never persisted on its
own. It carries the request -> member -> admin state machine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from groups.domain.value_objects import AccessLevel, GroupId, MembershipId, UserId


@dataclass
class Membership:
    """One user's relationship to one group.

    Business rules:
    - Transitions are monotonic: request -> member -> admin, never back
    - Promoting to a level already held (or exceeded) is a no-op
    - invitation_token is set while the row is a pending invitation

    Attributes:
        id: Membership identifier
        group_id: Owning group
        user_id: The member
        access_level: Current lifecycle state
        invitation_token: Token of a not-yet-accepted invitation
        group_last_viewed_at: Last time the user looked at the group's activity
        inviter_id: User who promoted or invited this member
        created_at: When the row was created
    """

    id: MembershipId
    group_id: GroupId
    user_id: UserId
    access_level: AccessLevel = AccessLevel.REQUEST
    invitation_token: str | None = None
    group_last_viewed_at: datetime | None = None
    inviter_id: UserId | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def build(cls, group_id: GroupId, user_id: UserId) -> Membership:
        """Stage a new request-state membership that is not yet attached to a group."""
        return cls(
            id=MembershipId.generate(),
            group_id=group_id,
            user_id=user_id,
        )

    def promote_to_member(self, inviter_id: UserId | None = None) -> bool:
        """Move a request to member state.

        Args:
            inviter_id: The user granting membership, if any

        Returns:
            True if the access level changed, False if already member or admin
        """
        if self.access_level.rank >= AccessLevel.MEMBER.rank:
            return False
        self.access_level = AccessLevel.MEMBER
        self.inviter_id = inviter_id
        return True

    def make_admin(self) -> bool:
        """Move a request or member to admin state.

        Returns:
            True if the access level changed, False if already admin
        """
        if self.access_level == AccessLevel.ADMIN:
            return False
        self.access_level = AccessLevel.ADMIN
        return True

    def mark_group_viewed(self, viewed_at: datetime) -> None:
        """Record that the user looked at the group's activity."""
        self.group_last_viewed_at = viewed_at

    def accept_invitation(self) -> bool:
        """Clear the invitation token once the invited user has signed up.

        Returns:
            True if a pending invitation was accepted
        """
        if self.invitation_token is None:
            return False
        self.invitation_token = None
        return True

    @property
    def is_request(self) -> bool:
        return self.access_level == AccessLevel.REQUEST

    @property
    def is_admin(self) -> bool:
        return self.access_level == AccessLevel.ADMIN

    @property
    def is_member_level(self) -> bool:
        """True for member and admin rows."""
        return self.access_level.is_member_level()

    @property
    def is_pending_invitation(self) -> bool:
        return self.invitation_token is not None
