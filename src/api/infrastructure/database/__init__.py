"""Database infrastructure - engines, sessions and the declarative base."""

from infrastructure.database.dependencies import (
    close_database_connections,
    get_write_engine,
    get_write_session,
)
from infrastructure.database.models import Base

__all__ = [
    "Base",
    "close_database_connections",
    "get_write_engine",
    "get_write_session",
]
