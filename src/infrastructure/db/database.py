"""
Database connection management.

Supports:
  - SQLite (local dev, tests, no setup)
  - PostgreSQL (production)

Connection string comes from the DATABASE_URL setting. Repositories use
the process-wide Database unless one is injected (tests use their own).
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from src.config.settings import get_settings
from src.infrastructure.db.models import Base

logger = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT_SECONDS = 30


def get_database_url() -> str:
    """Get database URL from settings / environment."""
    return get_settings().database_url


def create_db_engine(url: str | None = None) -> Engine:
    """Create SQLAlchemy engine."""
    db_url = url or get_database_url()

    if db_url.startswith("sqlite"):
        engine = create_engine(
            db_url,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_SECONDS},
            echo=False,
        )

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_SECONDS * 1000}")
            cursor.close()
    else:
        # PostgreSQL
        engine = create_engine(
            db_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            pool_timeout=10,
            echo=False,
        )

    return engine


class Database:
    """Engine + session factory for one database."""

    def __init__(self, url: str | None = None, engine: Engine | None = None):
        self.url = url or get_database_url()
        self.engine = engine or create_db_engine(self.url)
        self._factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_all(self) -> None:
        """Create all tables. Safe to call multiple times."""
        Base.metadata.create_all(self.engine)
        logger.info(f"Database initialized: {self.url.split('@')[-1] if '@' in self.url else self.url}")

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager for database sessions (commit on success)."""
        session = self._factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


# ── Global database ──
_database: Database | None = None


def get_database() -> Database:
    """Get or create the global database."""
    global _database
    if _database is None:
        _database = Database()
    return _database


def init_db() -> Database:
    """Create all tables on the global database."""
    db = get_database()
    db.create_all()
    return db
