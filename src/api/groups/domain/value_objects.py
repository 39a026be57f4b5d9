"""Value objects for the groups domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ulid import ULID

from groups.domain.exceptions import InvalidPermissionCategoryError


@dataclass(frozen=True)
class GroupId:
    """Identifier for a Group aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> GroupId:
        """Generate a new GroupId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> GroupId:
        """Create GroupId from string value.

        Args:
            value: ULID string

        Returns:
            GroupId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid GroupId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class UserId:
    """Identifier for a user held by the external user directory."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new UserId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid UserId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class MembershipId:
    """Identifier for a Membership entity."""

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> MembershipId:
        """Generate a new MembershipId using ULID."""
        return cls(value=str(ULID()))


@dataclass(frozen=True)
class DiscussionId:
    """Identifier for a discussion owned by the discussion store."""

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> DiscussionId:
        """Generate a new DiscussionId using ULID."""
        return cls(value=str(ULID()))


class PermissionCategory(StrEnum):
    """Audience a group exposes its content or invite rights to."""

    EVERYONE = "everyone"
    MEMBERS = "members"
    ADMINS = "admins"
    PARENT_GROUP_MEMBERS = "parent_group_members"

    @classmethod
    def parse(cls, value: PermissionCategory | str) -> PermissionCategory:
        """Parse a raw value into a PermissionCategory.

        Args:
            value: An existing category or its string form

        Returns:
            The matching PermissionCategory

        Raises:
            InvalidPermissionCategoryError: If value is not a known category
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidPermissionCategoryError(
                f"Unknown permission category: {value!r}"
            ) from e


class AccessLevel(StrEnum):
    """Lifecycle states of a membership.

    Transitions only ever move up the ladder request -> member -> admin.
    """

    REQUEST = "request"
    MEMBER = "member"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        """Position of this level on the promotion ladder."""
        return _ACCESS_LEVEL_RANKS[self]

    def is_member_level(self) -> bool:
        """Check if this level grants membership (member or admin)."""
        return self in MEMBER_ACCESS_LEVELS


_ACCESS_LEVEL_RANKS = {
    AccessLevel.REQUEST: 0,
    AccessLevel.MEMBER: 1,
    AccessLevel.ADMIN: 2,
}

MEMBER_ACCESS_LEVELS = (AccessLevel.MEMBER, AccessLevel.ADMIN)


@dataclass(frozen=True)
class DiscussionSummary:
    """Timestamps of a discussion as reported by the discussion store.

    Attributes:
        id: The discussion identifier
        group_id: The group the discussion belongs to
        created_at: When the discussion was started
        last_comment_at: When the latest comment was posted, if any
    """

    id: DiscussionId
    group_id: GroupId
    created_at: datetime
    last_comment_at: datetime | None = None


@dataclass(frozen=True)
class CommentSummary:
    """Authorship and timing of a single comment."""

    discussion_id: DiscussionId
    author_id: UserId
    created_at: datetime


@dataclass(frozen=True)
class ReadLogEntry:
    """A user's last recorded read of one discussion."""

    discussion_id: DiscussionId
    user_id: UserId
    discussion_last_viewed_at: datetime | None
