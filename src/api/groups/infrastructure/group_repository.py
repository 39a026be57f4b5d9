"""PostgreSQL implementation of IGroupRepository.

Group attributes live in the groups table and memberships in the
memberships table. The repository reconstitutes complete Group aggregates:
memberships in creation order and, for a subgroup, the parent group one
level deep with its own memberships.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from groups.domain.aggregates import Group, Membership
from groups.domain.exceptions import DuplicateMembershipError
from groups.domain.value_objects import (
    AccessLevel,
    GroupId,
    MembershipId,
    PermissionCategory,
    UserId,
)
from groups.infrastructure.models import (
    MEMBERSHIP_UNIQUE_CONSTRAINT,
    GroupModel,
    MembershipModel,
)
from groups.infrastructure.observability import (
    DefaultGroupRepositoryProbe,
    GroupRepositoryProbe,
)
from groups.ports.repositories import IGroupRepository


class GroupRepository(IGroupRepository):
    """Repository persisting Group aggregates and their memberships.

    The repository never commits: callers own the transaction (typically a
    `session.begin()` block in the application service). Writes are flushed
    eagerly so constraint violations surface inside the caller's unit of
    work.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: GroupRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession bound to the caller's transaction
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultGroupRepositoryProbe()

    async def save(self, group: Group) -> None:
        """Upsert the group row and sync its membership rows.

        Args:
            group: The Group aggregate to persist

        Raises:
            DuplicateMembershipError: If another writer created a membership
                for the same group and user first
        """
        model = await self._get_model(group.id.value, include_archived=True)
        if model is None:
            model = GroupModel(id=group.id.value, created_at=group.created_at)
            self._session.add(model)

        model.name = group.name
        model.description = group.description
        model.creator_id = group.creator_id.value if group.creator_id else None
        model.parent_id = group.parent_id.value if group.parent_id else None
        model.viewable_by = PermissionCategory.parse(group.viewable_by).value
        model.members_invitable_by = PermissionCategory.parse(
            group.members_invitable_by
        ).value
        model.max_size = group.max_size
        model.cannot_contribute = group.cannot_contribute
        model.beta_features = group.beta_features
        model.sectors_metric = list(group.sectors_metric)
        model.archived_at = group.archived_at
        model.updated_at = group.updated_at

        # The group row must exist before membership rows reference it
        await self._session.flush()
        await self._sync_memberships(group)

        try:
            await self._session.flush()
        except IntegrityError as e:
            if MEMBERSHIP_UNIQUE_CONSTRAINT in str(e):
                self._probe.duplicate_membership(group.id.value)
                raise DuplicateMembershipError(
                    f"A membership for this user already exists in group {group.id}"
                ) from e
            raise

        self._probe.group_saved(group.id.value, len(group.memberships))

    async def get_by_id(
        self, group_id: GroupId, include_archived: bool = False
    ) -> Group | None:
        """Fetch a group with its memberships and, if any, its parent.

        Args:
            group_id: The unique identifier of the group
            include_archived: Also return an archived group

        Returns:
            The hydrated Group aggregate, or None if not found
        """
        model = await self._get_model(group_id.value, include_archived)
        if model is None:
            self._probe.group_not_found(group_id.value)
            return None

        parent = None
        if model.parent_id is not None:
            # Inherited rules still apply under an archived parent
            parent_model = await self._get_model(model.parent_id, include_archived=True)
            if parent_model is not None:
                parent = await self._to_domain(parent_model)

        group = await self._to_domain(model, parent)
        self._probe.group_retrieved(group.id.value, len(group.memberships))
        return group

    async def list_subgroups(
        self, group_id: GroupId, include_archived: bool = False
    ) -> list[Group]:
        """List the subgroups of a group.

        Args:
            group_id: The parent group
            include_archived: Also return archived subgroups

        Returns:
            Subgroup aggregates with memberships, parents not hydrated
        """
        stmt = select(GroupModel).where(GroupModel.parent_id == group_id.value)
        if not include_archived:
            stmt = stmt.where(GroupModel.archived_at.is_(None))
        stmt = stmt.order_by(GroupModel.created_at)
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [await self._to_domain(model) for model in models]

    async def delete(self, group: Group) -> bool:
        """Delete a group row and all of its membership rows.

        Args:
            group: The Group aggregate to delete

        Returns:
            True if deleted, False if not found
        """
        model = await self._get_model(group.id.value, include_archived=True)
        if model is None:
            self._probe.group_not_found(group.id.value)
            return False

        await self._session.execute(
            delete(MembershipModel).where(MembershipModel.group_id == group.id.value)
        )
        await self._session.delete(model)
        await self._session.flush()

        self._probe.group_deleted(group.id.value, len(group.memberships))
        return True

    async def _get_model(
        self, group_id: str, include_archived: bool = False
    ) -> GroupModel | None:
        stmt = select(GroupModel).where(GroupModel.id == group_id)
        if not include_archived:
            stmt = stmt.where(GroupModel.archived_at.is_(None))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _load_memberships(self, group_id: str) -> list[MembershipModel]:
        stmt = (
            select(MembershipModel)
            .where(MembershipModel.group_id == group_id)
            .order_by(MembershipModel.created_at, MembershipModel.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def _sync_memberships(self, group: Group) -> None:
        """Make the membership rows match the aggregate.

        Rows the aggregate no longer holds are deleted, new memberships are
        inserted and existing rows are updated in place.
        """
        existing = {
            model.id: model for model in await self._load_memberships(group.id.value)
        }
        current_ids = {membership.id.value for membership in group.memberships}

        for model_id, model in existing.items():
            if model_id not in current_ids:
                await self._session.delete(model)

        for membership in group.memberships:
            model = existing.get(membership.id.value)
            if model is None:
                model = MembershipModel(
                    id=membership.id.value,
                    group_id=group.id.value,
                    user_id=membership.user_id.value,
                    created_at=membership.created_at,
                )
                self._session.add(model)

            model.access_level = membership.access_level.value
            model.invitation_token = membership.invitation_token
            model.inviter_id = membership.inviter_id.value if membership.inviter_id else None
            model.group_last_viewed_at = membership.group_last_viewed_at

    async def _to_domain(self, model: GroupModel, parent: Group | None = None) -> Group:
        """Convert a group row and its membership rows to a Group aggregate."""
        membership_models = await self._load_memberships(model.id)

        memberships = [
            Membership(
                id=MembershipId(value=row.id),
                group_id=GroupId(value=row.group_id),
                user_id=UserId(value=row.user_id),
                access_level=AccessLevel(row.access_level),
                invitation_token=row.invitation_token,
                group_last_viewed_at=row.group_last_viewed_at,
                inviter_id=UserId(value=row.inviter_id) if row.inviter_id else None,
                created_at=row.created_at,
            )
            for row in membership_models
        ]

        return Group(
            id=GroupId(value=model.id),
            name=model.name,
            creator_id=UserId(value=model.creator_id) if model.creator_id else None,
            description=model.description,
            parent_id=GroupId(value=model.parent_id) if model.parent_id else None,
            viewable_by=PermissionCategory(model.viewable_by),
            members_invitable_by=PermissionCategory(model.members_invitable_by),
            max_size=model.max_size,
            cannot_contribute=model.cannot_contribute,
            beta_features=model.beta_features,
            sectors_metric=list(model.sectors_metric or []),
            archived_at=model.archived_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            memberships=memberships,
            parent=parent,
        )
