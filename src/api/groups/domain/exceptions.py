"""Domain exceptions for the groups bounded context.

Every rule violation raised by the domain layer derives from
GroupDomainError. Validation failures are surfaced to the caller as-is and
never auto-corrected.
"""


class GroupDomainError(ValueError):
    """Base class for group and membership rule violations."""

    pass


class InvalidHierarchyError(GroupDomainError):
    """Raised when a group would end up more than one level below a root group.

    Covers pointing a group at a parent that itself has a parent, making a
    group its own parent, and placing a group that has subgroups under a
    parent.
    """

    pass


class MissingSizeLimitError(GroupDomainError):
    """Raised when a root group has no max_size after defaults were applied."""

    pass


class SizeLimitMustBeAbsentError(GroupDomainError):
    """Raised when a subgroup carries its own max_size."""

    pass


class InvalidSizeLimitError(GroupDomainError):
    """Raised when a root group's max_size is not a positive integer."""

    pass


class InvalidPermissionCategoryError(GroupDomainError):
    """Raised when viewable_by or members_invitable_by is not a known category."""

    pass


class InvalidNameError(GroupDomainError):
    """Raised when a group name is empty or longer than 250 characters."""

    pass


class InvalidDescriptionError(GroupDomainError):
    """Raised when a group description is longer than 250 characters."""

    pass


class DuplicateMembershipError(GroupDomainError):
    """Raised when a second membership is created for the same group and user.

    Callers should look up the existing membership and transition it
    instead of retrying the creation.
    """

    pass


class MembershipNotFoundError(GroupDomainError):
    """Raised when an operation targets a membership that does not exist."""

    pass
