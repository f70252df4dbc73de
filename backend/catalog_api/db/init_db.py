"""
Database Initialization

Builds the async SQLAlchemy engine and session factory for the record
store and creates the products table on startup.

SQLite connections get WAL journaling and a busy timeout so concurrent
requests do not trip over each other's locks, plus a Unicode-aware
lower() so case-insensitive matching works beyond ASCII.
"""
import logging
from pathlib import Path
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..config import Settings
from .models import Base

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() folds ASCII only; ilike compiles to lower()
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")  # 30 second timeout
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for settings.database_url.

    SQLite gets a 30s lock timeout and cross-thread access; other
    backends use driver defaults.
    """
    connect_args = {}
    if _is_sqlite(settings.database_url):
        connect_args = {
            "timeout": 30,  # 30 second timeout for lock acquisition
            "check_same_thread": False
        }

    engine = create_async_engine(
        settings.database_url,
        echo=False,
        connect_args=connect_args,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600  # Recycle connections after 1 hour
    )

    if _is_sqlite(settings.database_url):
        event.listen(engine.sync_engine, "connect", _configure_sqlite_connection)

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


def describe_url(url: str) -> str:
    """Database URL safe for logging (password masked)."""
    return make_url(url).render_as_string(hide_password=True)


async def initialize_database(engine: AsyncEngine) -> None:
    """
    Create all tables that do not exist yet.

    For file-backed SQLite the parent directory is created first.
    """
    url = engine.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database initialized at {engine.url.render_as_string(hide_password=True)}")


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions in FastAPI.

    The session factory is created by the application factory and stored
    on app.state.

    Usage:
        @router.get("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with request.app.state.session_factory() as session:
        yield session


# Alias for FastAPI Depends
get_db = get_async_session
