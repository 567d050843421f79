"""Engine and session lifecycle for the kidstats SQLite database.

One engine per process, built lazily from :func:`kidstats.config.get_settings`.
Connections enforce foreign keys; file databases also run in WAL mode so a
stats read never blocks the live recorder.

Example:
    >>> from kidstats.data.db import init_db, session_scope
    >>> init_db()
    ['children', 'games', 'players', 'stat_events', 'teams']
    >>> with session_scope() as session:
    ...     session.add(Child(name="Maya"))
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, event, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from kidstats.config import Settings, get_settings
from kidstats.data.schema import Base
from kidstats.logging import FAIL
from kidstats.types import StorageError

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_sessions: scoped_session[Session] | None = None


def _pragma_listener(use_wal: bool) -> Callable[[Any, Any], None]:
    pragmas = ["foreign_keys=ON"]
    if use_wal:
        pragmas += ["journal_mode=WAL", "synchronous=NORMAL"]

    def apply(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            for pragma in pragmas:
                cursor.execute(f"PRAGMA {pragma}")
        finally:
            cursor.close()

    return apply


def _build_engine(settings: Settings) -> Engine:
    if settings.is_memory_db:
        # Every session must share the single in-memory connection
        engine = create_engine(
            settings.database_url,
            echo=settings.sql_echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        settings.db_path_obj.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(settings.database_url, echo=settings.sql_echo)

    event.listen(engine, "connect", _pragma_listener(use_wal=not settings.is_memory_db))
    logger.debug(f"Engine created for {settings.database_url}")
    return engine


def get_engine() -> Engine:
    """Return the process engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = _build_engine(get_settings())
    return _engine


def get_session() -> Session:
    """Return the calling thread's session."""
    global _sessions
    if _sessions is None:
        _sessions = scoped_session(sessionmaker(bind=get_engine(), expire_on_commit=False))
    return _sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Unit of work: commit on success, roll back on any error.

    Database failures, including the final commit, are re-raised as
    :class:`kidstats.types.StorageError`; other exceptions propagate
    unchanged after the rollback.

    Yields:
        The thread's session. It is closed when the block exits.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"{FAIL} Unit of work rolled back: {exc}")
        raise StorageError(f"Database operation failed: {exc}") from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> list[str]:
    """Create any missing tables.

    Returns:
        Names of all tables present afterwards, sorted.
    """
    from kidstats.data import models  # noqa: F401  (registers the mappers)

    engine = get_engine()
    Base.metadata.create_all(engine)
    tables = sorted(inspect(engine).get_table_names())
    logger.debug(f"Schema ready: {', '.join(tables)}")
    return tables


def reset_engine() -> None:
    """Drop the cached engine and sessions (tests, settings changes)."""
    global _engine, _sessions
    if _sessions is not None:
        _sessions.remove()
        _sessions = None
    if _engine is not None:
        _engine.dispose()
        _engine = None


def read_pragma(name: str) -> Any:
    """Current value of a SQLite pragma on a fresh connection."""
    with get_engine().connect() as conn:
        return conn.execute(text(f"PRAGMA {name}")).scalar()


def verify_foreign_keys_enabled() -> bool:
    return read_pragma("foreign_keys") == 1
