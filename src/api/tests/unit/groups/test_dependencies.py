"""Unit tests for groups service wiring."""

from unittest.mock import create_autospec

from groups.application.services import ActivityService, GroupService
from groups.dependencies import get_activity_service, get_group_service
from groups.infrastructure.discussion_store import DiscussionActivityStore
from groups.infrastructure.group_repository import GroupRepository
from groups.ports.notifications import INotificationDispatcher
from groups.ports.repositories import IUserDirectory
from shared_kernel.observability_context import ObservationContext


class TestGetGroupService:
    def test_wires_postgres_adapters_to_the_session(self, mock_session):
        service = get_group_service(
            session=mock_session,
            user_directory=create_autospec(IUserDirectory, instance=True),
            notifier=create_autospec(INotificationDispatcher, instance=True),
        )

        assert isinstance(service, GroupService)
        assert isinstance(service._group_repository, GroupRepository)
        assert isinstance(service._discussion_store, DiscussionActivityStore)
        assert service._session is mock_session

    def test_binds_observation_context(self, mock_session):
        context = ObservationContext(request_id="req-1")

        service = get_group_service(
            session=mock_session,
            user_directory=create_autospec(IUserDirectory, instance=True),
            notifier=create_autospec(INotificationDispatcher, instance=True),
            context=context,
        )

        assert service._probe._context is context


class TestGetActivityService:
    def test_one_store_serves_discussions_and_read_logs(self, mock_session):
        service = get_activity_service(session=mock_session)

        assert isinstance(service, ActivityService)
        assert service._discussion_store is service._read_log_store
