"""Composition helpers for the groups bounded context.

Wires a database session to the PostgreSQL repositories and the application
services. The user directory and notification dispatcher belong to the
embedding system and are passed in.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from groups.application.observability import (
    DefaultActivityServiceProbe,
    DefaultGroupServiceProbe,
)
from groups.application.services import ActivityService, GroupService
from groups.infrastructure.discussion_store import DiscussionActivityStore
from groups.infrastructure.group_repository import GroupRepository
from groups.ports.notifications import INotificationDispatcher
from groups.ports.repositories import IUserDirectory
from infrastructure.settings import get_group_settings
from shared_kernel.observability_context import ObservationContext


def get_group_service(
    session: AsyncSession,
    user_directory: IUserDirectory,
    notifier: INotificationDispatcher,
    context: ObservationContext | None = None,
) -> GroupService:
    """Build a GroupService bound to the session's unit of work.

    Args:
        session: Session the service opens its transactions on
        user_directory: Lookup of users and the system account
        notifier: Dispatcher for membership request notifications
        context: Optional observation context bound to the service probe

    Returns:
        GroupService instance
    """
    probe = DefaultGroupServiceProbe()
    if context is not None:
        probe = probe.with_context(context)

    return GroupService(
        session=session,
        group_repository=GroupRepository(session=session),
        user_directory=user_directory,
        discussion_store=DiscussionActivityStore(session=session),
        notifier=notifier,
        settings=get_group_settings(),
        probe=probe,
    )


def get_activity_service(
    session: AsyncSession,
    context: ObservationContext | None = None,
) -> ActivityService:
    """Build an ActivityService reading through the given session."""
    probe = DefaultActivityServiceProbe()
    if context is not None:
        probe = probe.with_context(context)

    store = DiscussionActivityStore(session=session)
    return ActivityService(
        group_repository=GroupRepository(session=session),
        discussion_store=store,
        read_log_store=store,
        probe=probe,
    )
