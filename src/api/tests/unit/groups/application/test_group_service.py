"""Unit tests for GroupService."""

from unittest.mock import create_autospec

import pytest

from groups.application.observability import GroupServiceProbe
from groups.application.services.group_service import GroupService
from groups.domain.aggregates import Group, User
from groups.domain.exceptions import (
    DuplicateMembershipError,
    InvalidHierarchyError,
    MembershipNotFoundError,
)
from groups.domain.value_objects import AccessLevel, GroupId, UserId
from groups.ports.exceptions import GroupHasSubgroupsError, GroupNotFoundError
from groups.ports.notifications import INotificationDispatcher
from groups.ports.repositories import (
    IDiscussionStore,
    IGroupRepository,
    IUserDirectory,
)
from infrastructure.settings import GroupSettings


@pytest.fixture
def mock_group_repository():
    """Create mock group repository."""
    repository = create_autospec(IGroupRepository, instance=True)
    repository.list_subgroups.return_value = []
    return repository


@pytest.fixture
def mock_user_directory():
    """Create mock user directory with no system user."""
    directory = create_autospec(IUserDirectory, instance=True)
    directory.get_system_user.return_value = None
    directory.get_by_id.return_value = None
    return directory


@pytest.fixture
def mock_discussion_store():
    store = create_autospec(IDiscussionStore, instance=True)
    store.delete_for_group.return_value = 0
    return store


@pytest.fixture
def mock_notifier():
    return create_autospec(INotificationDispatcher, instance=True)


@pytest.fixture
def mock_probe():
    """Create mock group service probe."""
    return create_autospec(GroupServiceProbe, instance=True)


@pytest.fixture
def group_service(
    mock_session,
    mock_group_repository,
    mock_user_directory,
    mock_discussion_store,
    mock_notifier,
    mock_probe,
    group_settings,
):
    """Create GroupService with mock dependencies."""
    return GroupService(
        session=mock_session,
        group_repository=mock_group_repository,
        user_directory=mock_user_directory,
        discussion_store=mock_discussion_store,
        notifier=mock_notifier,
        settings=group_settings,
        probe=mock_probe,
    )


def _stored(repository, *groups: Group) -> None:
    """Make the mocked repository return the given groups by id."""
    by_id = {group.id: group for group in groups}

    async def get_by_id(group_id, include_archived=False):
        return by_id.get(group_id)

    repository.get_by_id.side_effect = get_by_id


def _with_subgroups(repository, *subgroups: Group) -> None:
    """Make list_subgroups honour parent_id and the archived filter."""

    async def list_subgroups(group_id, include_archived=False):
        return [
            group
            for group in subgroups
            if group.parent_id == group_id
            and (include_archived or not group.is_archived)
        ]

    repository.list_subgroups.side_effect = list_subgroups


class TestGroupServiceInit:
    """Tests for GroupService initialization."""

    def test_stores_session(self, group_service, mock_session):
        assert group_service._session is mock_session

    def test_uses_default_probe_when_not_provided(
        self,
        mock_session,
        mock_group_repository,
        mock_user_directory,
        mock_discussion_store,
        mock_notifier,
    ):
        """Service should create default probe and settings when not provided."""
        service = GroupService(
            session=mock_session,
            group_repository=mock_group_repository,
            user_directory=mock_user_directory,
            discussion_store=mock_discussion_store,
            notifier=mock_notifier,
        )

        assert service._probe is not None
        assert service._settings.default_max_size == 50


class TestCreateGroup:
    """Tests for create_group."""

    @pytest.mark.asyncio
    async def test_creates_root_group_with_creator_as_admin(
        self, group_service, mock_group_repository, mock_probe, mock_session
    ):
        creator = UserId.generate()

        group = await group_service.create_group(name="Tenants Union", creator_id=creator)

        assert group.max_size == 50
        assert group.membership(creator).access_level == AccessLevel.ADMIN
        mock_group_repository.save.assert_awaited_once_with(group)
        mock_session.begin.assert_called_once()
        mock_probe.group_created.assert_called_once_with(
            group_id=group.id.value,
            name="Tenants Union",
            parent_id=None,
            creator_id=creator.value,
        )

    @pytest.mark.asyncio
    async def test_drains_events_after_commit(self, group_service, mock_probe):
        group = await group_service.create_group(
            name="Tenants Union", creator_id=UserId.generate()
        )

        assert group.collect_events() == []
        published = [c.kwargs["event_type"] for c in mock_probe.event_published.call_args_list]
        assert published == ["GroupCreated", "MemberAdded"]

    @pytest.mark.asyncio
    async def test_creates_subgroup_under_loaded_parent(
        self, group_service, mock_group_repository, root_group
    ):
        _stored(mock_group_repository, root_group)

        group = await group_service.create_group(
            name="Housing", creator_id=UserId.generate(), parent_id=root_group.id
        )

        assert group.parent_id == root_group.id
        assert group.max_size is None
        assert group.full_name() == "Climate Action - Housing"

    @pytest.mark.asyncio
    async def test_system_user_creator_is_not_admin(
        self, group_service, mock_user_directory
    ):
        system_user = User(UserId.generate(), "Bot", "bot@example.org")
        mock_user_directory.get_system_user.return_value = system_user

        group = await group_service.create_group(name="Welcome", creator_id=system_user.id)

        assert group.memberships == []

    @pytest.mark.asyncio
    async def test_missing_parent_fails(self, group_service, mock_group_repository, mock_probe):
        mock_group_repository.get_by_id.return_value = None

        with pytest.raises(GroupNotFoundError):
            await group_service.create_group(
                name="Housing", creator_id=None, parent_id=GroupId.generate()
            )

        mock_group_repository.save.assert_not_awaited()
        mock_probe.group_creation_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_subgroup_parent_fails_without_saving(
        self, group_service, mock_group_repository, root_group, subgroup
    ):
        _stored(mock_group_repository, root_group, subgroup)

        with pytest.raises(InvalidHierarchyError):
            await group_service.create_group(
                name="Bikes", creator_id=None, parent_id=subgroup.id
            )

        mock_group_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_uses_configured_default_size(
        self,
        mock_session,
        mock_group_repository,
        mock_user_directory,
        mock_discussion_store,
        mock_notifier,
    ):
        service = GroupService(
            session=mock_session,
            group_repository=mock_group_repository,
            user_directory=mock_user_directory,
            discussion_store=mock_discussion_store,
            notifier=mock_notifier,
            settings=GroupSettings(default_max_size=300),
        )

        group = await service.create_group(name="Big", creator_id=None)

        assert group.max_size == 300


class TestUpdateGroup:
    """Tests for update_group."""

    @pytest.mark.asyncio
    async def test_updates_attributes(
        self, group_service, mock_group_repository, mock_probe, root_group
    ):
        _stored(mock_group_repository, root_group)

        group = await group_service.update_group(root_group.id, description="Local action")

        assert group.description == "Local action"
        mock_group_repository.save.assert_awaited_once_with(root_group)
        mock_probe.group_updated.assert_called_once_with(
            group_id=root_group.id.value, changed_fields=("description",)
        )

    @pytest.mark.asyncio
    async def test_no_changes_skips_save(self, group_service, mock_group_repository, root_group):
        _stored(mock_group_repository, root_group)

        await group_service.update_group(root_group.id, name="Climate Action")

        mock_group_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_group_with_subgroups_cannot_move(
        self, group_service, mock_group_repository, root_group, subgroup
    ):
        """A parent group cannot be placed under another group."""
        other = Group(id=GroupId.generate(), name="Other", max_size=5)
        _stored(mock_group_repository, root_group, other)
        mock_group_repository.list_subgroups.return_value = [subgroup]

        with pytest.raises(InvalidHierarchyError):
            await group_service.update_group(root_group.id, parent_id=other.id, max_size=None)

        mock_group_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_group_with_archived_subgroup_cannot_move(
        self, group_service, mock_group_repository, root_group, subgroup, t0
    ):
        """An archived subgroup still counts; moving its parent would nest it two levels deep."""
        other = Group(id=GroupId.generate(), name="Other", max_size=5)
        subgroup.archive(t0)
        _stored(mock_group_repository, root_group, other)
        _with_subgroups(mock_group_repository, subgroup)

        with pytest.raises(InvalidHierarchyError):
            await group_service.update_group(root_group.id, parent_id=other.id, max_size=None)

        mock_group_repository.list_subgroups.assert_awaited_once_with(
            root_group.id, include_archived=True
        )
        mock_group_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_detach_subgroup_to_root(self, group_service, mock_group_repository, root_group, subgroup):
        _stored(mock_group_repository, root_group, subgroup)

        group = await group_service.update_group(subgroup.id, parent_id=None, max_size=20)

        assert group.is_root is True
        assert group.max_size == 20

    @pytest.mark.asyncio
    async def test_unknown_group_fails(self, group_service, mock_group_repository):
        mock_group_repository.get_by_id.return_value = None

        with pytest.raises(GroupNotFoundError):
            await group_service.update_group(GroupId.generate(), name="X")


class TestArchiveAndDelete:
    """Tests for archive_group and delete_group."""

    @pytest.mark.asyncio
    async def test_archive_group(self, group_service, mock_group_repository, mock_probe, root_group):
        _stored(mock_group_repository, root_group)

        group = await group_service.archive_group(root_group.id)

        assert group.is_archived is True
        mock_group_repository.save.assert_awaited_once_with(root_group)
        mock_probe.group_archived.assert_called_once_with(group_id=root_group.id.value)

    @pytest.mark.asyncio
    async def test_delete_group_removes_discussions_and_group(
        self,
        group_service,
        mock_group_repository,
        mock_discussion_store,
        mock_probe,
        root_group,
    ):
        root_group.add_member(UserId.generate())
        _stored(mock_group_repository, root_group)
        mock_group_repository.delete.return_value = True
        mock_discussion_store.delete_for_group.return_value = 3

        result = await group_service.delete_group(root_group.id)

        assert result is True
        mock_discussion_store.delete_for_group.assert_awaited_once_with(root_group.id)
        mock_group_repository.delete.assert_awaited_once_with(root_group)
        mock_probe.group_deleted.assert_called_once_with(
            group_id=root_group.id.value, memberships_deleted=1, discussions_deleted=3
        )

    @pytest.mark.asyncio
    async def test_delete_missing_group_returns_false(self, group_service, mock_group_repository):
        mock_group_repository.get_by_id.return_value = None

        assert await group_service.delete_group(GroupId.generate()) is False
        mock_group_repository.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_group_with_subgroups_is_refused(
        self, group_service, mock_group_repository, mock_discussion_store, root_group, subgroup
    ):
        _stored(mock_group_repository, root_group)
        mock_group_repository.list_subgroups.return_value = [subgroup]

        with pytest.raises(GroupHasSubgroupsError):
            await group_service.delete_group(root_group.id)

        mock_discussion_store.delete_for_group.assert_not_awaited()
        mock_group_repository.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_group_with_only_archived_subgroups_is_refused(
        self,
        group_service,
        mock_group_repository,
        mock_discussion_store,
        root_group,
        subgroup,
        t0,
    ):
        """Deleting the parent would turn the archived subgroup into a root without a size limit."""
        subgroup.archive(t0)
        _stored(mock_group_repository, root_group)
        _with_subgroups(mock_group_repository, subgroup)

        with pytest.raises(GroupHasSubgroupsError):
            await group_service.delete_group(root_group.id)

        mock_discussion_store.delete_for_group.assert_not_awaited()
        mock_group_repository.delete.assert_not_awaited()


class TestJoinRequests:
    """Tests for add_join_request and its notification."""

    @pytest.mark.asyncio
    async def test_join_request_notifies_once(
        self, group_service, mock_group_repository, mock_notifier, root_group, subgroup
    ):
        """A parent member's request on a subgroup is saved and notified once."""
        user_id = UserId.generate()
        root_group.add_member(user_id)
        _stored(mock_group_repository, root_group, subgroup)

        membership = await group_service.add_join_request(subgroup.id, user_id)
        second = await group_service.add_join_request(subgroup.id, user_id)

        assert membership is not None and membership.is_request
        assert second is None
        mock_group_repository.save.assert_awaited_once_with(subgroup)
        mock_notifier.notify_new_membership_request.assert_awaited_once_with(
            subgroup, membership
        )

    @pytest.mark.asyncio
    async def test_ineligible_request_is_not_saved(
        self, group_service, mock_group_repository, mock_notifier, subgroup
    ):
        _stored(mock_group_repository, subgroup)

        result = await group_service.add_join_request(subgroup.id, UserId.generate())

        assert result is None
        mock_group_repository.save.assert_not_awaited()
        mock_notifier.notify_new_membership_request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_request(
        self, group_service, mock_group_repository, mock_notifier, mock_probe, root_group
    ):
        """A broken notifier is logged; the committed request stands."""
        _stored(mock_group_repository, root_group)
        mock_notifier.notify_new_membership_request.side_effect = RuntimeError("smtp down")
        user_id = UserId.generate()

        membership = await group_service.add_join_request(root_group.id, user_id)

        assert membership is not None
        assert root_group.find_membership_or_request(user_id) is membership
        mock_probe.notification_failed.assert_called_once_with(
            group_id=root_group.id.value,
            membership_id=membership.id.value,
            error="smtp down",
        )


class TestMemberships:
    """Tests for add_member, add_admin, remove_membership and record_group_view."""

    @pytest.mark.asyncio
    async def test_add_member(self, group_service, mock_group_repository, root_group):
        _stored(mock_group_repository, root_group)
        user_id, inviter = UserId.generate(), UserId.generate()

        membership = await group_service.add_member(root_group.id, user_id, inviter_id=inviter)

        assert membership.access_level == AccessLevel.MEMBER
        assert membership.inviter_id == inviter
        mock_group_repository.save.assert_awaited_once_with(root_group)

    @pytest.mark.asyncio
    async def test_add_admin_promotes_request(self, group_service, mock_group_repository, root_group):
        user_id = UserId.generate()
        root_group.add_join_request(user_id)
        _stored(mock_group_repository, root_group)

        membership = await group_service.add_admin(root_group.id, user_id)

        assert membership.access_level == AccessLevel.ADMIN
        assert len(root_group.memberships) == 1

    @pytest.mark.asyncio
    async def test_lost_race_surfaces_duplicate_membership(
        self, group_service, mock_group_repository, mock_probe, root_group
    ):
        """A concurrent writer's row makes the save fail with DuplicateMembershipError."""
        _stored(mock_group_repository, root_group)
        mock_group_repository.save.side_effect = DuplicateMembershipError("taken")
        user_id = UserId.generate()

        with pytest.raises(DuplicateMembershipError):
            await group_service.add_member(root_group.id, user_id)

        mock_probe.duplicate_membership_detected.assert_called_once_with(
            group_id=root_group.id.value, user_id=user_id.value
        )

    @pytest.mark.asyncio
    async def test_remove_membership(self, group_service, mock_group_repository, root_group):
        user_id = UserId.generate()
        root_group.add_member(user_id)
        _stored(mock_group_repository, root_group)

        await group_service.remove_membership(root_group.id, user_id)

        assert root_group.memberships == []
        mock_group_repository.save.assert_awaited_once_with(root_group)

    @pytest.mark.asyncio
    async def test_remove_missing_membership(self, group_service, mock_group_repository, root_group):
        _stored(mock_group_repository, root_group)

        with pytest.raises(MembershipNotFoundError):
            await group_service.remove_membership(root_group.id, UserId.generate())

    @pytest.mark.asyncio
    async def test_record_group_view(self, group_service, mock_group_repository, root_group, t0):
        user_id = UserId.generate()
        root_group.add_member(user_id)
        _stored(mock_group_repository, root_group)

        membership = await group_service.record_group_view(root_group.id, user_id, t0)

        assert membership.group_last_viewed_at == t0

    @pytest.mark.asyncio
    async def test_get_membership_excludes_requests(
        self, group_service, mock_group_repository, root_group
    ):
        requester = UserId.generate()
        root_group.add_join_request(requester)
        _stored(mock_group_repository, root_group)

        assert await group_service.get_membership(root_group.id, requester) is None

    @pytest.mark.asyncio
    async def test_get_membership_of_unknown_group(self, group_service, mock_group_repository):
        mock_group_repository.get_by_id.return_value = None

        assert await group_service.get_membership(GroupId.generate(), UserId.generate()) is None


class TestInvitations:
    """Tests for invited members."""

    @pytest.mark.asyncio
    async def test_add_member_with_invitation_token(
        self, group_service, mock_group_repository, root_group
    ):
        _stored(mock_group_repository, root_group)
        user_id = UserId.generate()

        membership = await group_service.add_member(
            root_group.id, user_id, invitation_token="tok-1"
        )

        assert membership.is_pending_invitation is True
        assert root_group.invited_users() == [user_id]
        mock_group_repository.save.assert_awaited_once_with(root_group)

    @pytest.mark.asyncio
    async def test_accept_invitation(self, group_service, mock_group_repository, root_group):
        user_id = UserId.generate()
        root_group.add_member(user_id, invitation_token="tok-1")
        _stored(mock_group_repository, root_group)

        membership = await group_service.accept_invitation(root_group.id, user_id)

        assert membership.invitation_token is None
        mock_group_repository.save.assert_awaited_once_with(root_group)

    @pytest.mark.asyncio
    async def test_accept_invitation_for_non_member_fails(
        self, group_service, mock_group_repository, root_group
    ):
        _stored(mock_group_repository, root_group)

        with pytest.raises(MembershipNotFoundError):
            await group_service.accept_invitation(root_group.id, UserId.generate())

        mock_group_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_parent_members_visible_to_sorts_by_name(
        self,
        group_service,
        mock_group_repository,
        mock_user_directory,
        root_group,
        subgroup,
    ):
        """Inviters see the parent's invited members too, sorted by name."""
        zoe = User(UserId.generate(), "Zoe", "zoe@example.org")
        ana = User(UserId.generate(), "ana", "ana@example.org")
        root_group.add_member(zoe.id)
        root_group.add_member(ana.id, invitation_token="tok-1")
        _stored(mock_group_repository, root_group, subgroup)
        users = {zoe.id: zoe, ana.id: ana}

        async def get_by_id(user_id):
            return users.get(user_id)

        mock_user_directory.get_by_id.side_effect = get_by_id

        assert await group_service.parent_members_visible_to(subgroup.id, zoe.id) == [
            ana,
            zoe,
        ]
        assert await group_service.parent_members_visible_to(
            subgroup.id, UserId.generate()
        ) == [zoe]


class TestQueries:
    """Tests for permission and contact queries."""

    @pytest.mark.asyncio
    async def test_user_can_join_and_has_admin_user(
        self, group_service, mock_group_repository, root_group, subgroup
    ):
        admin = UserId.generate()
        root_group.add_admin(admin)
        _stored(mock_group_repository, root_group, subgroup)

        assert await group_service.user_can_join(subgroup.id, admin) is True
        assert await group_service.has_admin_user(subgroup.id, admin) is True
        assert await group_service.user_can_join(subgroup.id, UserId.generate()) is False

    @pytest.mark.asyncio
    async def test_admin_email_uses_first_admin(
        self, group_service, mock_group_repository, mock_user_directory, root_group, t0
    ):
        first = User(UserId.generate(), "First", "first@example.org")
        second = User(UserId.generate(), "Second", "second@example.org")
        root_group.add_admin(second.id).created_at = t0
        root_group.add_admin(first.id).created_at = t0.replace(year=2020)
        _stored(mock_group_repository, root_group)
        users = {first.id: first, second.id: second}

        async def get_by_id(user_id):
            return users.get(user_id)

        mock_user_directory.get_by_id.side_effect = get_by_id

        assert await group_service.admin_email(root_group.id) == "first@example.org"

    @pytest.mark.asyncio
    async def test_admin_email_falls_back_to_creator(
        self, group_service, mock_group_repository, mock_user_directory, root_group
    ):
        creator = User(UserId.generate(), "Creator", "creator@example.org")
        root_group.creator_id = creator.id
        _stored(mock_group_repository, root_group)
        mock_user_directory.get_by_id.return_value = creator

        assert await group_service.admin_email(root_group.id) == "creator@example.org"

    @pytest.mark.asyncio
    async def test_admin_email_fixed_fallback(self, group_service, mock_group_repository, root_group):
        _stored(mock_group_repository, root_group)

        assert await group_service.admin_email(root_group.id) == "noreply@loomio.org"

    @pytest.mark.asyncio
    async def test_full_name_uses_configured_separator(
        self,
        mock_session,
        mock_group_repository,
        mock_user_directory,
        mock_discussion_store,
        mock_notifier,
        subgroup,
    ):
        service = GroupService(
            session=mock_session,
            group_repository=mock_group_repository,
            user_directory=mock_user_directory,
            discussion_store=mock_discussion_store,
            notifier=mock_notifier,
            settings=GroupSettings(name_separator=" :: "),
        )
        _stored(mock_group_repository, subgroup)

        assert await service.full_name(subgroup.id) == "Climate Action :: Transport"
