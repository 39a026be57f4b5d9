"""Notification port for the groups context."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from groups.domain.aggregates import Group, Membership


@runtime_checkable
class INotificationDispatcher(Protocol):
    """Outbound notifications about membership activity.

    Delivery is best-effort: a failure here must never undo the membership
    change that triggered it.
    """

    async def notify_new_membership_request(
        self, group: Group, membership: Membership
    ) -> None:
        """Tell the group's admins that a user asked to join.

        Args:
            group: The group that received the request
            membership: The request-state membership
        """
        ...
