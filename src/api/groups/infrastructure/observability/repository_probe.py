"""Domain probes for groups repository operations.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events related to group and discussion persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class GroupRepositoryProbe(Protocol):
    """Domain probe for group repository operations.

    Records domain events during group and membership persistence.
    """

    def group_saved(self, group_id: str, membership_count: int) -> None:
        """Record that a group and its memberships were saved."""
        ...

    def group_retrieved(self, group_id: str, membership_count: int) -> None:
        """Record that a group was retrieved with memberships hydrated."""
        ...

    def group_not_found(self, group_id: str) -> None:
        """Record that a group was not found."""
        ...

    def group_deleted(self, group_id: str, membership_count: int) -> None:
        """Record that a group and its memberships were deleted."""
        ...

    def duplicate_membership(self, group_id: str) -> None:
        """Record that the membership uniqueness constraint was violated."""
        ...

    def with_context(self, context: ObservationContext) -> GroupRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DiscussionStoreProbe(Protocol):
    """Domain probe for discussion store operations."""

    def discussions_loaded(self, group_id: str, count: int) -> None:
        """Record that a group's discussions were loaded."""
        ...

    def discussions_deleted(self, group_id: str, count: int) -> None:
        """Record that a group's discussions were deleted."""
        ...

    def with_context(self, context: ObservationContext) -> DiscussionStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultGroupRepositoryProbe:
    """Default implementation of GroupRepositoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultGroupRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultGroupRepositoryProbe(logger=self._logger, context=context)

    def group_saved(self, group_id: str, membership_count: int) -> None:
        """Record that a group and its memberships were saved."""
        self._logger.info(
            "group_saved",
            group_id=group_id,
            membership_count=membership_count,
            **self._get_context_kwargs(),
        )

    def group_retrieved(self, group_id: str, membership_count: int) -> None:
        """Record that a group was retrieved with memberships hydrated."""
        self._logger.debug(
            "group_retrieved",
            group_id=group_id,
            membership_count=membership_count,
            **self._get_context_kwargs(),
        )

    def group_not_found(self, group_id: str) -> None:
        """Record that a group was not found."""
        self._logger.debug(
            "group_not_found",
            group_id=group_id,
            **self._get_context_kwargs(),
        )

    def group_deleted(self, group_id: str, membership_count: int) -> None:
        """Record that a group and its memberships were deleted."""
        self._logger.info(
            "group_deleted",
            group_id=group_id,
            membership_count=membership_count,
            **self._get_context_kwargs(),
        )

    def duplicate_membership(self, group_id: str) -> None:
        """Record that the membership uniqueness constraint was violated."""
        self._logger.warning(
            "duplicate_membership",
            group_id=group_id,
            **self._get_context_kwargs(),
        )


class DefaultDiscussionStoreProbe:
    """Default implementation of DiscussionStoreProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultDiscussionStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultDiscussionStoreProbe(logger=self._logger, context=context)

    def discussions_loaded(self, group_id: str, count: int) -> None:
        self._logger.debug(
            "discussions_loaded",
            group_id=group_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def discussions_deleted(self, group_id: str, count: int) -> None:
        self._logger.info(
            "discussions_deleted",
            group_id=group_id,
            count=count,
            **self._get_context_kwargs(),
        )
