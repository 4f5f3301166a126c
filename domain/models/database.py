"""
Database configuration and session management.
"""

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from app.config import settings

logger = logging.getLogger("mymixes.database")

# Create SQLAlchemy Base
Base = declarative_base()


def create_database_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine for ``url``.

    SQLite connections get foreign key enforcement switched on so that
    ``ON DELETE CASCADE`` behaves the same as on PostgreSQL.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, echo=echo, future=True, **kwargs)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_sqlite_fk(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


@lru_cache
def get_engine() -> Engine:
    """Process-wide engine, created on first use"""
    logger.info("Creating database engine")
    return create_database_engine(settings.database_url, echo=settings.db_echo)


@lru_cache
def get_session_factory() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, future=True)


def init_database(bind: Optional[Engine] = None):
    """Initialize database schema"""
    # Import models so every table is registered on Base.metadata
    import domain.models  # noqa: F401

    Base.metadata.create_all(bind=bind or get_engine())
    logger.info("Database tables created successfully")


def get_db_session() -> Generator[Session, None, None]:
    """Get database session (for FastAPI dependency injection)"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    """Timezone-aware current time, used as the default for timestamp columns"""
    return datetime.now(timezone.utc)
