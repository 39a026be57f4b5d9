"""Permission resolution for groups.

Pure functions computing the effective visibility, invite rights, feature
flags, size limits and display names of a group. The parent is always an
explicit input: inheritance reaches exactly one level up, and a root group
ignores whatever parent it is handed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from groups.domain.value_objects import GroupId, PermissionCategory, UserId

if TYPE_CHECKING:
    from groups.domain.aggregates.group import Group
    from groups.domain.aggregates.user import User

DEFAULT_MAX_SIZE = 50
DEFAULT_NAME_SEPARATOR = " - "
FALLBACK_ADMIN_EMAIL = "noreply@loomio.org"


def _inherited_parent(group: Group, parent: Group | None) -> Group | None:
    if group.parent_id is None:
        return None
    return parent


def default_viewable_by(parent_id: GroupId | None) -> PermissionCategory:
    """Visibility a group gets when none was given."""
    if parent_id is None:
        return PermissionCategory.MEMBERS
    return PermissionCategory.PARENT_GROUP_MEMBERS


def default_members_invitable_by() -> PermissionCategory:
    """Invite rights a group gets when none were given, whatever its position."""
    return PermissionCategory.MEMBERS


def default_max_size(
    parent_id: GroupId | None,
    max_size: int | None,
    default: int = DEFAULT_MAX_SIZE,
) -> int | None:
    """Fill in the size limit of a new root group.

    Args:
        parent_id: The group's parent, if any
        max_size: The size limit given by the caller
        default: Limit applied to root groups that have none

    Returns:
        The given max_size when set or when the group is a subgroup,
        otherwise the default
    """
    if parent_id is None and max_size is None:
        return default
    return max_size


def effective_beta_features(group: Group, parent: Group | None) -> bool:
    """Whether beta features are on for a group.

    True if the group's own flag is set, or if it is a subgroup whose
    parent's own flag is set.
    """
    if group.beta_features:
        return True
    inherited = _inherited_parent(group, parent)
    return inherited is not None and inherited.beta_features is True


def effective_max_size(group: Group, parent: Group | None) -> int | None:
    """Size limit in force for a group.

    Root groups carry their own limit; subgroups fall under their parent's.
    """
    inherited = _inherited_parent(group, parent)
    if inherited is None:
        return group.max_size
    return inherited.max_size


def full_name(
    group: Group,
    parent: Group | None,
    separator: str = DEFAULT_NAME_SEPARATOR,
) -> str:
    """Display name prefixed with the parent's name for subgroups."""
    inherited = _inherited_parent(group, parent)
    if inherited is None:
        return group.name
    return inherited.name + separator + group.name


def root_name(group: Group, parent: Group | None) -> str:
    """Name of the root group this group sits under (or its own name)."""
    inherited = _inherited_parent(group, parent)
    if inherited is None:
        return group.name
    return inherited.name


def admin_email(
    admins: Sequence[User],
    creator: User | None,
    fallback: str = FALLBACK_ADMIN_EMAIL,
) -> str:
    """Contact address for a group.

    Args:
        admins: Admin users in the group's admin ordering
        creator: The group's creator, if known
        fallback: Address used when there is neither an admin nor a creator

    Returns:
        The first admin's email, else the creator's, else the fallback
    """
    if admins:
        return admins[0].email
    if creator is not None:
        return creator.email
    return fallback


def has_admin_user(group: Group, parent: Group | None, user_id: UserId) -> bool:
    """Admin authority over a group: its own admins plus its parent's admins."""
    if group.is_admin(user_id):
        return True
    inherited = _inherited_parent(group, parent)
    return inherited is not None and inherited.is_admin(user_id)


def user_can_join(group: Group, parent: Group | None, user_id: UserId) -> bool:
    """Whether a user may ask to join a group.

    Anyone may ask to join a root group; a subgroup only accepts requests
    from members of its parent.
    """
    if group.parent_id is None:
        return True
    return parent is not None and parent.membership(user_id) is not None


def audience_includes(
    category: PermissionCategory,
    group: Group,
    parent: Group | None,
    user_id: UserId | None,
) -> bool:
    """Check if a user belongs to the audience a permission category names.

    Args:
        category: The permission category to resolve
        group: The group the category is set on
        parent: The group's parent, if any
        user_id: The user asking, or None for an anonymous visitor

    Returns:
        True if the user falls inside the audience
    """
    if category == PermissionCategory.EVERYONE:
        return True
    if user_id is None:
        return False
    if category == PermissionCategory.ADMINS:
        return has_admin_user(group, parent, user_id)
    if group.membership(user_id) is not None:
        return True
    if category == PermissionCategory.PARENT_GROUP_MEMBERS:
        inherited = _inherited_parent(group, parent)
        return inherited is not None and inherited.membership(user_id) is not None
    return False


def can_view(group: Group, parent: Group | None, user_id: UserId | None) -> bool:
    """Resolve the group's viewable_by category for a user."""
    return audience_includes(group.viewable_by, group, parent, user_id)


def can_invite_members(
    group: Group, parent: Group | None, user_id: UserId | None
) -> bool:
    """Resolve the group's members_invitable_by category for a user."""
    return audience_includes(group.members_invitable_by, group, parent, user_id)


def parent_members_visible_to(
    group: Group, parent: Group | None, user_id: UserId | None
) -> list[UserId]:
    """Parent members a user may pick from when filling a subgroup.

    Users who may invite members into the parent also see the parent's
    pending invitations; everyone else sees accepted members only. A root
    group has no parent members.
    """
    inherited = _inherited_parent(group, parent)
    if inherited is None:
        return []
    if can_invite_members(inherited, None, user_id):
        return inherited.users_and_invited_users()
    return inherited.users()
