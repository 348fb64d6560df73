"""Database connection and session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.config import get_settings
from hr_payroll.errors import PersistenceFailedError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def get_engine(database_url: str | None = None) -> Engine:
    """Create database engine."""
    url = database_url or get_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


# Global engine and session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def init_db(create_tables: bool = True) -> tuple[Engine, sessionmaker[Session]]:
    """Initialize database engine and session factory."""
    global _engine, _session_factory
    if _engine is None:
        _engine = get_engine()
        _session_factory = sessionmaker(
            _engine,
            class_=Session,
            expire_on_commit=False,
            autoflush=False,
        )
        if create_tables:
            from hr_payroll.models import Base

            Base.metadata.create_all(_engine)
    return _engine, _session_factory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session."""
    _, factory = init_db()
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def commit_or_raise(session: Session) -> None:
    """Commit the current unit of work.

    On failure the session is rolled back, so loaded objects revert to the
    stored state, and PersistenceFailedError is raised.
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Commit failed: %s", e)
        raise PersistenceFailedError(f"Could not persist changes: {e}") from e
