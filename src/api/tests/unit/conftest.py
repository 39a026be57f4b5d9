"""Unit test fixtures with mocked dependencies."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def group_settings():
    """Provide group policy settings with the stock defaults."""
    from infrastructure.settings import GroupSettings

    return GroupSettings()


@pytest.fixture
def mock_session():
    """Create mock async session with transaction support."""
    session = AsyncMock()
    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=None)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    session.begin = MagicMock(return_value=mock_transaction)
    session.add = MagicMock()
    return session


@pytest.fixture
def t0() -> datetime:
    """A fixed reference moment."""
    return datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def root_group():
    """A root group with no memberships."""
    from groups.domain.aggregates import Group
    from groups.domain.value_objects import GroupId

    return Group(id=GroupId.generate(), name="Climate Action", max_size=50)


@pytest.fixture
def subgroup(root_group):
    """A subgroup of root_group, with the parent hydrated."""
    from groups.domain.aggregates import Group
    from groups.domain.value_objects import GroupId

    return Group(id=GroupId.generate(), name="Transport", parent=root_group)
