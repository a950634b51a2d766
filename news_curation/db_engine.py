"""
SQLAlchemy engine and session management for the news curation store.

SQLite only enforces ON DELETE CASCADE when the foreign_keys pragma is on,
so every engine handed to this module gets a connect hook that enables it.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from news_curation.constants import DB_NAME

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _bind(engine: Engine) -> None:
    global _engine, _session_factory
    if engine.dialect.name == "sqlite" and not event.contains(
        engine, "connect", _enable_sqlite_foreign_keys
    ):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    _engine = engine
    _session_factory = sessionmaker(bind=engine)


def get_engine() -> Engine:
    """Get the engine for the curation database, creating it on first use."""
    if _engine is None:
        _bind(create_engine(f"sqlite:///{DB_NAME}"))
    return _engine


def set_engine(engine: Engine) -> None:
    """Point the store at another engine (tests use an in-memory one)."""
    _bind(engine)


def reset_engine() -> None:
    """Dispose of the current engine so the next call recreates it."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""
    if _session_factory is None:
        get_engine()

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
