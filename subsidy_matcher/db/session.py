"""Database session management with connection pooling."""

from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from subsidy_matcher.settings import settings


def create_db_engine(
    database_url: str,
    pool_size: int = 5,
    max_overflow: int = 10,
) -> Engine:
    """Create an engine for the given URL.

    SQLite in-memory databases share one connection across threads,
    SQLite files use the default pool, every other backend gets a QueuePool.
    """
    if database_url.startswith("sqlite"):
        in_memory = database_url in ("sqlite://", "sqlite:///") or ":memory:" in database_url
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if in_memory else None,
            echo=False,
        )
    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=False,
    )


@lru_cache(maxsize=None)
def get_engine(database_url: Optional[str] = None) -> Engine:
    """Process-wide engine (created on first use)."""
    return create_db_engine(
        database_url or settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_pool_max_overflow,
    )


def make_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine or get_engine())


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides database session.

    Yields:
        Database session
    """
    db = make_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_session(session_factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic commit/rollback.

    Usage:
        with get_session() as session:
            session.add(obj)
            # Commits automatically on exit, rollbacks on exception

    Yields:
        Database session
    """
    session = (session_factory or make_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
