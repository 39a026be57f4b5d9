"""Observability probes for the Group aggregate.

Domain probes for Group following the Domain Oriented Observability pattern.
Probes emit structured logs with domain-specific context for membership
lifecycle operations.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import Protocol

import structlog


class GroupProbe(Protocol):
    """Protocol for group aggregate observability probes."""

    def membership_requested(self, group_id: str, user_id: str) -> None:
        """Probe emitted when a user asks to join a group."""
        ...

    def join_request_ignored(self, group_id: str, user_id: str, reason: str) -> None:
        """Probe emitted when a join request is a no-op.

        Args:
            group_id: The group ID
            user_id: The requesting user
            reason: "not_eligible" or "already_exists"
        """
        ...

    def member_added(self, group_id: str, user_id: str, access_level: str) -> None:
        """Probe emitted when a new membership row is created at member level or above."""
        ...

    def access_level_changed(
        self,
        group_id: str,
        user_id: str,
        old_access_level: str,
        new_access_level: str,
    ) -> None:
        """Probe emitted when an existing membership is promoted."""
        ...

    def membership_removed(self, group_id: str, user_id: str, access_level: str) -> None:
        """Probe emitted when a membership is destroyed."""
        ...

    def creator_admin_skipped(self, group_id: str, creator_id: str | None) -> None:
        """Probe emitted when the creator is not made admin (system user or unknown)."""
        ...


class DefaultGroupProbe:
    """Default implementation of GroupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger()

    def membership_requested(self, group_id: str, user_id: str) -> None:
        """Log join request with structured context."""
        self._logger.info(
            "group_membership_requested",
            group_id=group_id,
            user_id=user_id,
        )

    def join_request_ignored(self, group_id: str, user_id: str, reason: str) -> None:
        """Log ignored join request."""
        self._logger.debug(
            "group_join_request_ignored",
            group_id=group_id,
            user_id=user_id,
            reason=reason,
        )

    def member_added(self, group_id: str, user_id: str, access_level: str) -> None:
        """Log member addition with structured context."""
        self._logger.info(
            "group_member_added",
            group_id=group_id,
            user_id=user_id,
            access_level=access_level,
        )

    def access_level_changed(
        self,
        group_id: str,
        user_id: str,
        old_access_level: str,
        new_access_level: str,
    ) -> None:
        """Log promotion with structured context."""
        self._logger.info(
            "group_member_access_level_changed",
            group_id=group_id,
            user_id=user_id,
            old_access_level=old_access_level,
            new_access_level=new_access_level,
        )

    def membership_removed(self, group_id: str, user_id: str, access_level: str) -> None:
        """Log membership removal with structured context."""
        self._logger.info(
            "group_membership_removed",
            group_id=group_id,
            user_id=user_id,
            access_level=access_level,
        )

    def creator_admin_skipped(self, group_id: str, creator_id: str | None) -> None:
        """Log that the creator was not granted admin."""
        self._logger.debug(
            "group_creator_admin_skipped",
            group_id=group_id,
            creator_id=creator_id,
        )
