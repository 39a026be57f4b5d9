"""Protocol for group application service observability.

Defines the interface for domain probes that capture application-level
domain events for group service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class GroupServiceProbe(Protocol):
    """Domain probe for group application service operations."""

    def group_created(
        self,
        group_id: str,
        name: str,
        parent_id: str | None,
        creator_id: str | None,
    ) -> None:
        """Record that a group was created."""
        ...

    def group_creation_failed(
        self,
        name: str,
        parent_id: str | None,
        error: str,
    ) -> None:
        """Record that group creation failed."""
        ...

    def group_updated(self, group_id: str, changed_fields: tuple[str, ...]) -> None:
        """Record that group attributes changed."""
        ...

    def group_archived(self, group_id: str) -> None:
        """Record that a group was archived."""
        ...

    def group_deleted(
        self,
        group_id: str,
        memberships_deleted: int,
        discussions_deleted: int,
    ) -> None:
        """Record that a group and its dependents were deleted."""
        ...

    def duplicate_membership_detected(self, group_id: str, user_id: str) -> None:
        """Record that a concurrent writer created the same membership first."""
        ...

    def notification_failed(
        self,
        group_id: str,
        membership_id: str,
        error: str,
    ) -> None:
        """Record that a membership request notification could not be sent."""
        ...

    def event_published(self, event_type: str, group_id: str) -> None:
        """Record that a domain event was drained after commit."""
        ...

    def with_context(self, context: ObservationContext) -> GroupServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultGroupServiceProbe:
    """Default implementation of GroupServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultGroupServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultGroupServiceProbe(logger=self._logger, context=context)

    def group_created(
        self,
        group_id: str,
        name: str,
        parent_id: str | None,
        creator_id: str | None,
    ) -> None:
        """Record that a group was created."""
        self._logger.info(
            "group_created",
            group_id=group_id,
            name=name,
            parent_id=parent_id,
            creator_id=creator_id,
            **self._get_context_kwargs(),
        )

    def group_creation_failed(
        self,
        name: str,
        parent_id: str | None,
        error: str,
    ) -> None:
        """Record that group creation failed."""
        self._logger.error(
            "group_creation_failed",
            name=name,
            parent_id=parent_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def group_updated(self, group_id: str, changed_fields: tuple[str, ...]) -> None:
        """Record that group attributes changed."""
        self._logger.info(
            "group_updated",
            group_id=group_id,
            changed_fields=list(changed_fields),
            **self._get_context_kwargs(),
        )

    def group_archived(self, group_id: str) -> None:
        """Record that a group was archived."""
        self._logger.info(
            "group_archived",
            group_id=group_id,
            **self._get_context_kwargs(),
        )

    def group_deleted(
        self,
        group_id: str,
        memberships_deleted: int,
        discussions_deleted: int,
    ) -> None:
        """Record that a group and its dependents were deleted."""
        self._logger.info(
            "group_deleted",
            group_id=group_id,
            memberships_deleted=memberships_deleted,
            discussions_deleted=discussions_deleted,
            **self._get_context_kwargs(),
        )

    def duplicate_membership_detected(self, group_id: str, user_id: str) -> None:
        """Record that a concurrent writer created the same membership first."""
        self._logger.warning(
            "duplicate_membership_detected",
            group_id=group_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def notification_failed(
        self,
        group_id: str,
        membership_id: str,
        error: str,
    ) -> None:
        """Record that a membership request notification could not be sent."""
        self._logger.error(
            "membership_request_notification_failed",
            group_id=group_id,
            membership_id=membership_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def event_published(self, event_type: str, group_id: str) -> None:
        """Record that a domain event was drained after commit."""
        self._logger.debug(
            "group_event_published",
            event_type=event_type,
            group_id=group_id,
            **self._get_context_kwargs(),
        )
