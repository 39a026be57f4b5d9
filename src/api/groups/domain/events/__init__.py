"""Domain events for the groups bounded context.

Domain events capture facts about things that have happened in the domain.
They are immutable value objects that carry all the information needed
to describe the occurrence of an event.

The application layer drains them after each committed unit of work and
hands the ones with side effects (such as join requests) to collaborators.
"""

from groups.domain.events.group import (
    GroupArchived,
    GroupCreated,
    GroupDeleted,
    GroupUpdated,
    MembershipSnapshot,
)
from groups.domain.events.membership import (
    MemberAdded,
    MembershipAccessLevelChanged,
    MembershipRemoved,
    MembershipRequested,
)

# Type alias for all domain events in the groups context
DomainEvent = (
    GroupCreated
    | GroupUpdated
    | GroupArchived
    | GroupDeleted
    | MembershipRequested
    | MemberAdded
    | MembershipAccessLevelChanged
    | MembershipRemoved
)

__all__ = [
    # Group events
    "GroupCreated",
    "GroupUpdated",
    "GroupArchived",
    "GroupDeleted",
    "MembershipSnapshot",
    # Membership events
    "MembershipRequested",
    "MemberAdded",
    "MembershipAccessLevelChanged",
    "MembershipRemoved",
    # Type alias
    "DomainEvent",
]
