"""Database engine and session management for Cloudship.

SQLite by default; any SQLAlchemy URL (e.g. PostgreSQL) via DATABASE_URL.
Sessions are request-scoped through FastAPI's Depends(get_db).
"""

import os
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from src.db.models import Base

DEFAULT_DATABASE_URL = "sqlite:///./cloudship.db"


def get_database_url() -> str:
    """Resolve the database URL.

    Precedence:
    1. DATABASE_URL
    2. CLOUDSHIP_DB_PATH (a file path, or an sqlite: URL)
    3. ./cloudship.db
    """
    database_url = os.environ.get("DATABASE_URL", "").strip()
    if database_url:
        return database_url

    db_path = os.environ.get("CLOUDSHIP_DB_PATH", "").strip()
    if db_path:
        return db_path if db_path.startswith("sqlite:") else f"sqlite:///{db_path}"

    return DEFAULT_DATABASE_URL


DATABASE_URL = get_database_url()
_IS_SQLITE = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    # Sync routes run in FastAPI's thread pool
    connect_args={"check_same_thread": False} if _IS_SQLITE else {},
    echo=os.environ.get("SQL_ECHO", "").lower() == "true",
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on foreign keys (cascade location settings) and WAL for SQLite."""
    if not _IS_SQLITE:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session; routes commit explicitly."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the shops and location_settings tables if missing."""
    Base.metadata.create_all(bind=engine)


def close_db() -> None:
    """Dispose of the connection pool."""
    engine.dispose()
