"""Activity application service for the groups bounded context.

Gathers the facts the unread activity computation needs from the group
repository and the discussion/read-log collaborators.
"""

from __future__ import annotations

from groups.application.observability import (
    ActivityServiceProbe,
    DefaultActivityServiceProbe,
)
from groups.domain import activity
from groups.domain.value_objects import GroupId, UserId
from groups.ports.repositories import (
    IDiscussionStore,
    IGroupRepository,
    IReadLogStore,
)


class ActivityService:
    """Read-only service answering "does this user have unread activity?".

    Never raises domain errors: unknown groups and non-members simply have
    no unread activity.
    """

    def __init__(
        self,
        group_repository: IGroupRepository,
        discussion_store: IDiscussionStore,
        read_log_store: IReadLogStore,
        probe: ActivityServiceProbe | None = None,
    ):
        self._group_repository = group_repository
        self._discussion_store = discussion_store
        self._read_log_store = read_log_store
        self._probe = probe or DefaultActivityServiceProbe()

    async def has_unread_activity(self, group_id: GroupId, user_id: UserId) -> bool:
        """Check if a user has unseen discussions or comments in a group.

        Args:
            group_id: The group to check
            user_id: The user asking

        Returns:
            True if there is unread activity
        """
        group = await self._group_repository.get_by_id(group_id)
        if group is None:
            self._probe.unread_activity_skipped(
                group_id=group_id.value, user_id=user_id.value, reason="group_not_found"
            )
            return False

        membership = group.membership(user_id)
        if membership is None:
            self._probe.unread_activity_skipped(
                group_id=group_id.value, user_id=user_id.value, reason="not_a_member"
            )
            return False

        discussions = await self._discussion_store.list_for_group(group_id)
        if discussions:
            comments = await self._discussion_store.list_comments_for_group(group_id)
            read_logs = await self._read_log_store.list_for_user(
                user_id, [discussion.id for discussion in discussions]
            )
        else:
            comments, read_logs = [], []

        has_unread = activity.has_unread_activity(
            membership=membership,
            user_id=user_id,
            discussions=discussions,
            comments=comments,
            read_logs=read_logs,
        )

        self._probe.unread_activity_checked(
            group_id=group_id.value,
            user_id=user_id.value,
            has_unread=has_unread,
            discussion_count=len(discussions),
        )
        return has_unread
