"""SQLite implementation of the Database protocol.

Thin wrapper around aiosqlite.Connection — no SQL translation needed
since engine code already uses SQLite-flavored SQL.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from versioned_records.db.schema import record_tables_sql
from versioned_records.errors import ConstraintViolation, PersistenceFailure

if TYPE_CHECKING:
    import aiosqlite

    from versioned_records.db.backend import Cursor, Row
    from versioned_records.registry import VersioningConfig

logger = logging.getLogger(__name__)


class SQLiteCursor:
    """Wraps aiosqlite.Cursor to satisfy the Cursor protocol."""

    def __init__(self, cursor: aiosqlite.Cursor) -> None:
        """Initialize with an aiosqlite cursor."""
        self._cursor = cursor

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last operation."""
        rc = self._cursor.rowcount
        return rc if rc is not None else -1

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        return await self._cursor.fetchone()

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        return list(await self._cursor.fetchall())


class SQLiteBackend:
    """SQLite implementation of the Database protocol.

    Passes all calls through to the underlying aiosqlite.Connection.
    A single connection has a single transaction, so ``transaction()``
    serializes callers with an asyncio lock and yields a ``SQLiteTransaction``.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Initialize with an aiosqlite connection."""
        self._conn = conn
        self._tx_lock = asyncio.Lock()

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        try:
            cursor = await self._conn.execute(sql, params)
        except sqlite3.IntegrityError as e:
            raise ConstraintViolation(str(e)) from e
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e
        return SQLiteCursor(cursor)

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements (DDL)."""
        try:
            await self._conn.executescript(sql)
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e

    async def commit(self) -> None:
        """Commit the current transaction."""
        try:
            await self._conn.commit()
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLiteTransaction]:
        """Commit the enclosed statements together, or roll all of them back."""
        async with self._tx_lock:
            try:
                if not self._conn.in_transaction:
                    await self.execute("BEGIN")
                yield SQLiteTransaction(self)
                await self.commit()
            except BaseException:
                await self._conn.rollback()
                logger.debug("Transaction rolled back")
                raise

    async def ensure_tables(self, config: VersioningConfig) -> None:
        """Create the record and version tables for a registered type."""
        await _create_tables(self, config)
        await self.commit()

    async def sync_id_sequence(self, table: str) -> None:
        """No-op: AUTOINCREMENT already tracks the largest id ever inserted."""


class SQLiteTransaction:
    """Database protocol bound to an open SQLite transaction.

    Statements run on the backend's connection without taking its lock.
    ``commit()`` is a no-op; the outermost ``transaction()`` commits.
    Nested ``transaction()`` calls run as savepoints.
    """

    def __init__(self, backend: SQLiteBackend, depth: int = 0) -> None:
        """Initialize with the backend that owns the open transaction."""
        self._backend = backend
        self._depth = depth

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        return await self._backend.execute(sql, params)

    async def executescript(self, sql: str) -> None:
        """Not supported: sqlite3 commits the pending transaction before a script."""
        raise RuntimeError("executescript cannot run inside a transaction")

    async def commit(self) -> None:
        """No-op — the enclosing transaction block commits."""

    async def close(self) -> None:
        """No-op — the backend owns the connection."""

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLiteTransaction]:
        """Nested transaction (savepoint) inside the open one."""
        name = f"sp_{self._depth + 1}"
        await self.execute(f"SAVEPOINT {name}")
        try:
            yield SQLiteTransaction(self._backend, self._depth + 1)
        except BaseException:
            await self.execute(f"ROLLBACK TO SAVEPOINT {name}")
            await self.execute(f"RELEASE SAVEPOINT {name}")
            raise
        await self.execute(f"RELEASE SAVEPOINT {name}")

    async def ensure_tables(self, config: VersioningConfig) -> None:
        """Create the record and version tables for a registered type."""
        await _create_tables(self, config)

    async def sync_id_sequence(self, table: str) -> None:
        """No-op: AUTOINCREMENT already tracks the largest id ever inserted."""


async def _create_tables(db: SQLiteBackend | SQLiteTransaction, config: VersioningConfig) -> None:
    for statement in record_tables_sql(config, dialect="sqlite"):
        await db.execute(statement)
    logger.debug("Tables ready for %s", config.record_type)
