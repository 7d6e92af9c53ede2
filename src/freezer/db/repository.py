"""Database engine and session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from freezer.config import get_settings
from freezer.db.models import Base

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None
logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Return a shared SQLAlchemy engine (SQLite unless a URL is configured)."""
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    settings = get_settings()
    url = make_url(database_url or settings.sqlalchemy_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    _engine = create_engine(url, future=True, echo=False, pool_pre_ping=True)
    if url.get_backend_name() == "sqlite":
        event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
    try:
        Base.metadata.create_all(_engine)
    except OperationalError as exc:
        if "already exists" in str(exc).lower():
            logger.debug("Database schema already initialized: %s", exc)
        else:
            raise
    _session_factory = sessionmaker(bind=_engine, autoflush=False, autocommit=False, future=True)
    logger.debug("Database engine ready backend=%s", url.get_backend_name())
    return _engine


def get_session() -> Session:
    """Return a new SQLAlchemy session."""

    if _session_factory is None:
        get_engine()
    assert _session_factory is not None  # for mypy
    return _session_factory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context manager yielding a session with automatic commit/rollback."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ping() -> None:
    """Run a trivial query; raises when the database is unreachable."""

    with get_engine().connect() as connection:
        connection.execute(text("SELECT 1")).scalar_one()


def reset_repository_state() -> None:
    """Reset cached engine/session state (intended for testing)."""

    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def clamp_page(
    limit: Optional[int],
    offset: Optional[int],
    *,
    default: int = 20,
    maximum: int = 100,
) -> tuple[int, int]:
    """Bound pagination parameters instead of rejecting them."""

    page_limit = default if limit is None else min(max(int(limit), 1), maximum)
    page_offset = max(int(offset or 0), 0)
    return page_limit, page_offset


__all__ = [
    "clamp_page",
    "get_engine",
    "get_session",
    "ping",
    "reset_repository_state",
    "session_scope",
]
