"""Database engine and session management for the filing store."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from campfin.storage.models import *  # noqa: F401, F403
from campfin.storage.models import Filing, FilingPdf


async def create_engine_and_init(
    db_path: Path,
    echo: bool = False,
) -> AsyncEngine:
    """Create an async engine and initialize the database schema.

    Creates all tables if they don't exist. Configures WAL mode and
    foreign keys (needed for the blob cascade) via a connect listener.

    Args:
        db_path: Path to the SQLite database file.
        echo: Whether to echo SQL statements (for debugging).

    Returns:
        An initialized AsyncEngine.
    """
    url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, connection_record: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    return engine


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create a session factory bound to the engine."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_database(
    db_path: Path,
    echo: bool = False,
) -> tuple[AsyncEngine, async_sessionmaker]:
    """Initialize database and return engine + session factory.

    Args:
        db_path: Path to the SQLite database file.
        echo: Whether to echo SQL statements.

    Returns:
        Tuple of (engine, session_factory).
    """
    engine = await create_engine_and_init(db_path, echo=echo)
    session_factory = get_session_factory(engine)
    return engine, session_factory


async def open_database_read_only(
    db_path: Path,
    echo: bool = False,
) -> tuple[AsyncEngine, async_sessionmaker]:
    """Open an existing filing database without modifying it.

    The file is opened with SQLite's ``mode=ro``: no schema is created and
    the journal mode is left as it is.

    Args:
        db_path: Path to an existing SQLite database file.
        echo: Whether to echo SQL statements.

    Returns:
        Tuple of (engine, session_factory).

    Raises:
        sqlalchemy.exc.OperationalError: If the file cannot be opened.
        sqlalchemy.exc.NoSuchTableError: If a filing table is missing.
    """
    url = f"sqlite+aiosqlite:///file:{db_path}?mode=ro&uri=true"
    engine = create_async_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    try:
        async with engine.connect() as conn:
            table_names = await conn.run_sync(
                lambda sync_conn: sa.inspect(sync_conn).get_table_names()
            )
        for table_name in (Filing.__tablename__, FilingPdf.__tablename__):
            if table_name not in table_names:
                raise sa.exc.NoSuchTableError(table_name)
    except Exception:
        await engine.dispose()
        raise

    return engine, get_session_factory(engine)
