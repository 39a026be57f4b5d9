"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    DatabaseSettings,
    GroupSettings,
    Settings,
    get_group_settings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_max_equal_to_min_is_valid(self):
        settings = DatabaseSettings(pool_min_connections=5, pool_max_connections=5)
        assert settings.pool_max_connections == 5

    def test_pool_min_must_be_positive(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_pool_max_respects_upper_limit(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)

    def test_connection_string_hides_password(self):
        settings = DatabaseSettings(password="secret")
        assert "secret" not in settings.connection_string

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AGORA_DB_HOST", "db.internal")
        assert DatabaseSettings().host == "db.internal"


class TestGroupSettings:
    """Tests for group policy settings."""

    def test_defaults(self):
        settings = GroupSettings()

        assert settings.default_max_size == 50
        assert settings.fallback_admin_email == "noreply@loomio.org"
        assert settings.name_separator == " - "

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AGORA_GROUPS_DEFAULT_MAX_SIZE", "120")
        monkeypatch.setenv("AGORA_GROUPS_FALLBACK_ADMIN_EMAIL", "help@example.org")

        settings = GroupSettings()

        assert settings.default_max_size == 120
        assert settings.fallback_admin_email == "help@example.org"

    def test_default_max_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            GroupSettings(default_max_size=0)

    def test_accessor_is_cached(self):
        assert get_group_settings() is get_group_settings()


class TestSettings:
    def test_sections(self):
        settings = Settings()

        assert settings.app_name == "Agora Groups"
        assert isinstance(settings.database, DatabaseSettings)
        assert isinstance(settings.groups, GroupSettings)
