"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        AGORA_DB_HOST: Database host (default: localhost)
        AGORA_DB_PORT: Database port (default: 5432)
        AGORA_DB_DATABASE: Database name (default: agora)
        AGORA_DB_USERNAME: Database user (default: agora)
        AGORA_DB_PASSWORD: Database password (required in production)
        AGORA_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        AGORA_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="AGORA_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="agora", description="Database name")
    username: str = Field(default="agora", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class GroupSettings(BaseSettings):
    """Group policy settings.

    Environment variables:
        AGORA_GROUPS_DEFAULT_MAX_SIZE: Size limit given to new root groups (default: 50)
        AGORA_GROUPS_FALLBACK_ADMIN_EMAIL: Contact address for groups without
            admins or creator (default: noreply@loomio.org)
        AGORA_GROUPS_NAME_SEPARATOR: Separator between parent and subgroup
            names in full names (default: " - ")
    """

    model_config = SettingsConfigDict(
        env_prefix="AGORA_GROUPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_max_size: int = Field(
        default=50,
        description="Size limit applied to new root groups without one",
        ge=1,
    )
    fallback_admin_email: str = Field(
        default="noreply@loomio.org",
        description="Contact address used when a group has no admin or creator",
    )
    name_separator: str = Field(
        default=" - ",
        description="Separator used by full group names",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="AGORA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Agora Groups", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Minimum log level")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def groups(self) -> GroupSettings:
        """Get group policy settings."""
        return get_group_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_group_settings() -> GroupSettings:
    """Get cached group policy settings."""
    return GroupSettings()
