"""Port-level exceptions for the groups bounded context.

These exceptions represent errors that occur while loading or removing
aggregates. They should be caught and handled by the caller of the
application layer.
"""


class GroupNotFoundError(Exception):
    """Raised when a group cannot be found.

    Archived groups count as not found unless the operation explicitly
    includes them.
    """

    pass


class GroupHasSubgroupsError(Exception):
    """Raised when attempting to hard-delete a group that still has subgroups.

    The subgroups must be deleted or moved first.
    """

    pass
