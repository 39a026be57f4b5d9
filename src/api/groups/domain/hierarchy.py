"""Structural validation for groups.

Run before a group is persisted, on creation and on every update. Each
check raises the matching GroupDomainError subclass; callers validate a
candidate before touching the real aggregate so a failure never leaves a
partial write behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from groups.domain.exceptions import (
    InvalidDescriptionError,
    InvalidHierarchyError,
    InvalidNameError,
    InvalidPermissionCategoryError,
    InvalidSizeLimitError,
    MissingSizeLimitError,
    SizeLimitMustBeAbsentError,
)
from groups.domain.value_objects import PermissionCategory

if TYPE_CHECKING:
    from groups.domain.aggregates.group import Group

MAX_NAME_LENGTH = 250
MAX_DESCRIPTION_LENGTH = 250


def validate_name(name: str) -> None:
    """Group names are required and at most 250 characters."""
    if not name or not name.strip():
        raise InvalidNameError("Group name can't be blank")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"Group name must be at most {MAX_NAME_LENGTH} characters"
        )


def validate_description(description: str | None) -> None:
    """Descriptions are optional and at most 250 characters."""
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidDescriptionError(
            f"Group description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )


def validate_permission_categories(group: Group) -> None:
    """viewable_by and members_invitable_by must both be set to known categories."""
    for field_name in ("viewable_by", "members_invitable_by"):
        value = getattr(group, field_name)
        if not isinstance(value, PermissionCategory):
            raise InvalidPermissionCategoryError(
                f"{field_name} must be one of "
                f"{', '.join(c.value for c in PermissionCategory)}, got {value!r}"
            )


def validate_parent(
    group: Group,
    parent: Group | None,
    has_subgroups: bool = False,
) -> None:
    """Enforce the two-level hierarchy.

    Args:
        group: The group being created or updated
        parent: The loaded group referenced by group.parent_id, if any
        has_subgroups: Whether other groups already point at this group

    Raises:
        InvalidHierarchyError: If the group would sit more than one level
            below a root group
    """
    if group.parent_id is None:
        return

    if group.parent_id == group.id:
        raise InvalidHierarchyError("A group can't be its own parent")

    if parent is None or parent.id != group.parent_id:
        raise InvalidHierarchyError(
            f"Parent group {group.parent_id} could not be resolved"
        )

    if parent.parent_id is not None:
        raise InvalidHierarchyError("Can't set a subgroup as parent")

    if has_subgroups:
        raise InvalidHierarchyError("A group with subgroups can't become a subgroup")


def validate_size_limit(group: Group) -> None:
    """Root groups need a positive max_size; subgroups must not have one."""
    if group.parent_id is None:
        if group.max_size is None:
            raise MissingSizeLimitError("A root group must have a max_size")
        if group.max_size < 1:
            raise InvalidSizeLimitError("max_size must be a positive integer")
    elif group.max_size is not None:
        raise SizeLimitMustBeAbsentError("A subgroup can't have its own max_size")


def validate_group(
    group: Group,
    parent: Group | None,
    has_subgroups: bool = False,
) -> None:
    """Run every structural and attribute check on a group.

    Raises:
        GroupDomainError: The first violated rule
    """
    validate_name(group.name)
    validate_description(group.description)
    validate_permission_categories(group)
    validate_parent(group, parent, has_subgroups=has_subgroups)
    validate_size_limit(group)
