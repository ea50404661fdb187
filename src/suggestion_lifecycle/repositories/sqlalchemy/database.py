"""Engine and session management for the suggestion cache database."""

from typing import Optional

from sqlalchemy import create_engine, Engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from suggestion_lifecycle.config.settings import get_settings

Base = declarative_base()

# Module-level database state (replaced by configure_database)
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _create_engine(database_url: str) -> Engine:
    kwargs: dict = {"echo": False}
    if database_url.startswith("sqlite"):
        # Sessions are used from the server's worker threads
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            # One shared connection, otherwise each session sees an empty database
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def configure_database(database_url: Optional[str] = None) -> Engine:
    """
    Point the module at a database, disposing any previous engine.

    Args:
        database_url: SQLAlchemy URL; ``Settings.get_database_url()`` if omitted.
    """
    global _engine, _SessionLocal

    reset_database()
    _engine = _create_engine(database_url or get_settings().get_database_url())
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_engine() -> Engine:
    """Get the configured engine, configuring from settings on first use."""
    if _engine is None:
        return configure_database()
    return _engine


def get_session() -> Session:
    """Open a new session on the configured database."""
    if _SessionLocal is None:
        configure_database()
    return _SessionLocal()


def init_db(database_url: Optional[str] = None) -> Engine:
    """
    Create the cache tables.

    With ``database_url`` the module is reconfigured first; otherwise the
    current (or settings-derived) engine is used.
    """
    from suggestion_lifecycle.repositories.sqlalchemy import orm_models  # noqa: F401

    engine = configure_database(database_url) if database_url else get_engine()
    Base.metadata.create_all(bind=engine)
    return engine


def reset_database() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
