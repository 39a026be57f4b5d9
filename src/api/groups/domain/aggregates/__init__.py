"""Domain aggregates for the groups context.

Aggregates are the core business objects containing state and business logic.
They enforce invariants and business rules without depending on infrastructure.
"""

from groups.domain.aggregates.group import UNSET, Group, Unset
from groups.domain.aggregates.membership import Membership
from groups.domain.aggregates.user import User

__all__ = [
    "UNSET",
    "Group",
    "Membership",
    "Unset",
    "User",
]
