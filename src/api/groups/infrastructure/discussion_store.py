"""PostgreSQL implementation of the discussion and read-log ports.

Reads the timestamps the unread activity computation needs and removes a
group's discussions when the group is hard-deleted.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from groups.domain.value_objects import (
    CommentSummary,
    DiscussionId,
    DiscussionSummary,
    GroupId,
    ReadLogEntry,
    UserId,
)
from groups.infrastructure.models import (
    CommentModel,
    DiscussionModel,
    DiscussionReadLogModel,
)
from groups.infrastructure.observability import (
    DefaultDiscussionStoreProbe,
    DiscussionStoreProbe,
)
from groups.ports.repositories import IDiscussionStore, IReadLogStore


class DiscussionActivityStore(IDiscussionStore, IReadLogStore):
    """Discussion, comment and read-log queries over the discussion tables."""

    def __init__(
        self,
        session: AsyncSession,
        probe: DiscussionStoreProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultDiscussionStoreProbe()

    async def list_for_group(self, group_id: GroupId) -> list[DiscussionSummary]:
        """List a group's discussions, oldest first."""
        stmt = (
            select(DiscussionModel)
            .where(DiscussionModel.group_id == group_id.value)
            .order_by(DiscussionModel.created_at)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        self._probe.discussions_loaded(group_id.value, len(models))
        return [
            DiscussionSummary(
                id=DiscussionId(value=model.id),
                group_id=GroupId(value=model.group_id),
                created_at=model.created_at,
                last_comment_at=model.last_comment_at,
            )
            for model in models
        ]

    async def list_comments_for_group(self, group_id: GroupId) -> list[CommentSummary]:
        """List every comment posted on the group's discussions."""
        stmt = (
            select(CommentModel)
            .join(DiscussionModel, CommentModel.discussion_id == DiscussionModel.id)
            .where(DiscussionModel.group_id == group_id.value)
            .order_by(CommentModel.created_at)
        )
        result = await self._session.execute(stmt)

        return [
            CommentSummary(
                discussion_id=DiscussionId(value=model.discussion_id),
                author_id=UserId(value=model.author_id),
                created_at=model.created_at,
            )
            for model in result.scalars().all()
        ]

    async def delete_for_group(self, group_id: GroupId) -> int:
        """Delete a group's discussions with their comments and read logs.

        Returns:
            Number of discussions deleted
        """
        result = await self._session.execute(
            select(DiscussionModel.id).where(DiscussionModel.group_id == group_id.value)
        )
        discussion_ids = list(result.scalars().all())
        if not discussion_ids:
            return 0

        await self._session.execute(
            delete(CommentModel).where(CommentModel.discussion_id.in_(discussion_ids))
        )
        await self._session.execute(
            delete(DiscussionReadLogModel).where(
                DiscussionReadLogModel.discussion_id.in_(discussion_ids)
            )
        )
        await self._session.execute(
            delete(DiscussionModel).where(DiscussionModel.id.in_(discussion_ids))
        )

        self._probe.discussions_deleted(group_id.value, len(discussion_ids))
        return len(discussion_ids)

    async def list_for_user(
        self, user_id: UserId, discussion_ids: list[DiscussionId]
    ) -> list[ReadLogEntry]:
        """List the user's read logs for the given discussions."""
        if not discussion_ids:
            return []

        stmt = select(DiscussionReadLogModel).where(
            DiscussionReadLogModel.user_id == user_id.value,
            DiscussionReadLogModel.discussion_id.in_(
                [discussion_id.value for discussion_id in discussion_ids]
            ),
        )
        result = await self._session.execute(stmt)

        return [
            ReadLogEntry(
                discussion_id=DiscussionId(value=model.discussion_id),
                user_id=UserId(value=model.user_id),
                discussion_last_viewed_at=model.discussion_last_viewed_at,
            )
            for model in result.scalars().all()
        ]
