"""SQLAlchemy ORM models for the groups bounded context.

These models map to database tables and are used by repository implementations.
"""

from groups.infrastructure.models.discussion import (
    CommentModel,
    DiscussionModel,
    DiscussionReadLogModel,
)
from groups.infrastructure.models.group import GroupModel
from groups.infrastructure.models.membership import (
    MEMBERSHIP_UNIQUE_CONSTRAINT,
    MembershipModel,
)

__all__ = [
    "CommentModel",
    "DiscussionModel",
    "DiscussionReadLogModel",
    "GroupModel",
    "MEMBERSHIP_UNIQUE_CONSTRAINT",
    "MembershipModel",
]
