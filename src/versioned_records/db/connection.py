"""Database connection management."""

import logging
from pathlib import Path

import aiosqlite

from versioned_records.config import get_database_url, get_db_path
from versioned_records.db.backend import Database
from versioned_records.db.sqlite_backend import SQLiteBackend
from versioned_records.registry import get_config, registered_types

logger = logging.getLogger(__name__)


async def create_connection(db_path: Path | str | None = None) -> Database:
    """Create a database connection with tables for every registered type.

    Dispatches to SQLite or PostgreSQL based on VR_DATABASE_URL.
    For in-memory SQLite databases, pass ":memory:".
    """
    # Explicit ":memory:" always uses SQLite (used by tests)
    if db_path == ":memory:":
        db = await _create_sqlite(":memory:")
    else:
        url = get_database_url()
        if url and url.startswith("postgresql"):
            db = await _create_postgres(url)
        else:
            db = await _create_sqlite(db_path or get_db_path())

    for record_cls in registered_types():
        await db.ensure_tables(get_config(record_cls))
    return db


async def _create_sqlite(db_path: Path | str) -> Database:
    """Create a SQLite backend with foreign keys enforced."""
    db_path = str(db_path)

    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row

    # Enable WAL mode for better concurrent read performance
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")

    db = SQLiteBackend(conn)
    logger.debug("SQLite database ready at %s", db_path)
    return db


async def _create_postgres(url: str) -> Database:
    """Create a PostgreSQL backend."""
    from versioned_records.db.postgres_backend import PostgresBackend

    return await PostgresBackend.create(url)
