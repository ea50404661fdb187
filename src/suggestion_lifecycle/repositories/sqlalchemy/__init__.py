"""SQLAlchemy repository implementations."""

from suggestion_lifecycle.repositories.sqlalchemy.database import (
    Base,
    configure_database,
    get_engine,
    get_session,
    init_db,
    reset_database,
)
from suggestion_lifecycle.repositories.sqlalchemy.cache_repo import SqlAlchemySuggestionCacheRepository

__all__ = [
    "Base",
    "configure_database",
    "get_engine",
    "get_session",
    "init_db",
    "reset_database",
    "SqlAlchemySuggestionCacheRepository",
]
