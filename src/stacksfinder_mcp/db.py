"""SQLite database connection and schema management.

Data is stored in ~/.stacksfinder/usage.db by default.
WAL mode is enabled so concurrent tool calls can read while one writes.
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)

DB_FILENAME = "usage.db"


def get_db_path(data_dir: Path) -> Path:
    """Database file inside ``data_dir``, creating the directory if needed."""
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


def get_db_url(data_dir: Path) -> str:
    return f"sqlite+aiosqlite:///{get_db_path(data_dir)}"


def _set_wal_mode(dbapi_connection, connection_record):
    """Enable WAL mode for concurrent reads during writes."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def create_engine(data_dir: Path) -> AsyncEngine:
    engine = create_async_engine(get_db_url(data_dir), echo=False)
    event.listen(engine.sync_engine, "connect", _set_wal_mode)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables if they don't exist."""
    from .sqlmodels import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Usage database initialized at %s", engine.url.database)
