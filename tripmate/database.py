"""
Database configuration and session management.
Uses SQLAlchemy 2.x as the document store for trips and trip items.
"""

from datetime import datetime, timezone
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from tripmate.config import settings
from tripmate.logging_config import get_logger

logger = get_logger(__name__)

# SQLAlchemy Base for ORM models
Base = declarative_base()


def build_engine(url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite URLs get a single shared connection so the in-memory database is
    visible from FastAPI's worker threads.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=False,
    )


engine = build_engine(settings.sqlalchemy_url)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI endpoints to get a database session.

    Yields:
        SQLAlchemy Session
    """
    db = SessionLocal()
    try:
        logger.debug("database_session_created")
        yield db
    finally:
        db.close()
        logger.debug("database_session_closed")


def init_db() -> None:
    """
    Initialize database tables.
    Only used for development/testing.
    """
    import tripmate.models  # noqa: F401

    logger.info("initializing_database_tables")
    Base.metadata.create_all(bind=engine)
    logger.info("database_tables_created")


def utcnow() -> datetime:
    """Naive UTC now; all stored timestamps are naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
