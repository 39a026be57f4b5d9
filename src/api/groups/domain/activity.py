"""Unread activity computation.

Decides whether a member has unseen content in a group by reconciling three
sources: the membership's group-level view time, the group's discussions
and comments, and the member's per-discussion read logs.

Comparisons against an unset timestamp are false, so a member who never
viewed the group has no unread activity.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from groups.domain.aggregates.membership import Membership
from groups.domain.value_objects import (
    CommentSummary,
    DiscussionId,
    DiscussionSummary,
    ReadLogEntry,
    UserId,
)


def _is_after(moment: datetime | None, reference: datetime | None) -> bool:
    if moment is None or reference is None:
        return False
    return moment > reference


def new_comments_since_group_view(
    comments: Iterable[CommentSummary],
    discussion_ids: set[DiscussionId],
    user_id: UserId,
    group_last_viewed_at: datetime | None,
) -> bool:
    """Any comment by someone else, in the group, posted after the last group view."""
    return any(
        comment.discussion_id in discussion_ids
        and comment.author_id != user_id
        and _is_after(comment.created_at, group_last_viewed_at)
        for comment in comments
    )


def discussions_changed_since_read(
    discussions: Sequence[DiscussionSummary],
    read_logs: Iterable[ReadLogEntry],
) -> bool:
    """Any read-logged discussion whose last comment is newer than the read."""
    by_id = {discussion.id: discussion for discussion in discussions}
    for log in read_logs:
        discussion = by_id.get(log.discussion_id)
        if discussion is not None and _is_after(
            discussion.last_comment_at, log.discussion_last_viewed_at
        ):
            return True
    return False


def unread_new_discussions(
    discussions: Iterable[DiscussionSummary],
    read_logs: Iterable[ReadLogEntry],
    group_last_viewed_at: datetime | None,
) -> set[DiscussionId]:
    """Discussions started after the last group view that were never read-logged."""
    created_since = {
        discussion.id
        for discussion in discussions
        if _is_after(discussion.created_at, group_last_viewed_at)
    }
    read_logged = {log.discussion_id for log in read_logs}
    return created_since - read_logged


def has_unread_activity(
    membership: Membership | None,
    user_id: UserId,
    discussions: Sequence[DiscussionSummary],
    comments: Iterable[CommentSummary],
    read_logs: Iterable[ReadLogEntry],
) -> bool:
    """Decide whether a user has unseen activity in a group.

    Unread comments need both the group-level and the discussion-level
    checks to agree. New discussions count when they were started after the
    last group view and the user has no read log for them.

    Args:
        membership: The user's member-level membership, or None
        user_id: The user asking
        discussions: The group's discussions
        comments: Comments on the group's discussions
        read_logs: Read logs for the group's discussions

    Returns:
        True if the user has unread activity in the group
    """
    if membership is None:
        return False

    last_viewed = membership.group_last_viewed_at
    discussion_ids = {discussion.id for discussion in discussions}
    user_logs = [
        log
        for log in read_logs
        if log.user_id == user_id and log.discussion_id in discussion_ids
    ]

    unread_comments = new_comments_since_group_view(
        comments, discussion_ids, user_id, last_viewed
    ) and discussions_changed_since_read(discussions, user_logs)

    if unread_comments:
        return True
    return bool(unread_new_discussions(discussions, user_logs, last_viewed))
