"""Protocol for activity application service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ActivityServiceProbe(Protocol):
    """Domain probe for unread activity checks."""

    def unread_activity_checked(
        self,
        group_id: str,
        user_id: str,
        has_unread: bool,
        discussion_count: int,
    ) -> None:
        """Record the outcome of an unread activity check."""
        ...

    def unread_activity_skipped(self, group_id: str, user_id: str, reason: str) -> None:
        """Record that a check short-circuited (unknown group or non-member)."""
        ...

    def with_context(self, context: ObservationContext) -> ActivityServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultActivityServiceProbe:
    """Default implementation of ActivityServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultActivityServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultActivityServiceProbe(logger=self._logger, context=context)

    def unread_activity_checked(
        self,
        group_id: str,
        user_id: str,
        has_unread: bool,
        discussion_count: int,
    ) -> None:
        """Record the outcome of an unread activity check."""
        self._logger.debug(
            "unread_activity_checked",
            group_id=group_id,
            user_id=user_id,
            has_unread=has_unread,
            discussion_count=discussion_count,
            **self._get_context_kwargs(),
        )

    def unread_activity_skipped(self, group_id: str, user_id: str, reason: str) -> None:
        """Record that a check short-circuited."""
        self._logger.debug(
            "unread_activity_skipped",
            group_id=group_id,
            user_id=user_id,
            reason=reason,
            **self._get_context_kwargs(),
        )
