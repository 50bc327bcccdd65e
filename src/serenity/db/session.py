"""Database session management.

Provides a cached engine and session factory per SQLite file. The default
file comes from the SERENITY_DB_PATH environment variable.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from serenity.db.schema import Base

DEFAULT_DB_PATH = Path(os.environ.get("SERENITY_DB_PATH", "data/serenity.db"))

# Module-level caches keyed by resolved db path
_engine_cache: dict[str, Engine] = {}
_session_factory_cache: dict[str, sessionmaker] = {}


def _cache_key(db_path: Path | None) -> tuple[Path, str]:
    path = Path(db_path) if db_path is not None else DEFAULT_DB_PATH
    return path, str(path.resolve())


def get_engine(db_path: Path | None = None) -> Engine:
    """Get SQLAlchemy engine for the database.

    Engines are cached by resolved db_path, so repeated calls share one
    connection pool.

    Args:
        db_path: Path to SQLite database file. Defaults to DEFAULT_DB_PATH.

    Returns:
        SQLAlchemy engine instance (cached).
    """
    path, key = _cache_key(db_path)
    if key in _engine_cache:
        return _engine_cache[key]

    path.parent.mkdir(parents=True, exist_ok=True)

    # Single shared connection; callers serialize writes per subject
    engine = create_engine(
        f"sqlite:///{path}",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _engine_cache[key] = engine
    return engine


def _get_session_factory(db_path: Path | None = None) -> sessionmaker:
    _, key = _cache_key(db_path)
    if key not in _session_factory_cache:
        _session_factory_cache[key] = sessionmaker(bind=get_engine(db_path))
    return _session_factory_cache[key]


def get_session(db_path: Path | None = None) -> Session:
    """Get a database session.

    Note: Caller is responsible for closing the session. For automatic
    resource management, use get_db_session() instead.
    """
    return _get_session_factory(db_path)()


@contextmanager
def get_db_session(db_path: Path | None = None) -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic cleanup.

    Commits on successful exit, rolls back on exception, and always
    closes the session.

    Example:
        with get_db_session() as session:
            store = SqlKeyValueStore(session)
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | None = None) -> None:
    """Create tables if they do not exist."""
    Base.metadata.create_all(get_engine(db_path))
