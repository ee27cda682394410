"""PostgreSQL implementation of the Database protocol.

Uses asyncpg for async access. All engine SQL uses ``?`` placeholders —
this backend translates them to ``$N`` at execute time.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import asyncpg

from versioned_records.db.schema import record_tables_sql
from versioned_records.errors import ConstraintViolation, PersistenceFailure

if TYPE_CHECKING:
    from versioned_records.db.backend import Cursor, Row
    from versioned_records.registry import VersioningConfig

logger = logging.getLogger(__name__)

# Pre-compiled regex for placeholder translation
_PLACEHOLDER_RE = re.compile(r"\?")


def _translate_placeholders(sql: str) -> str:
    """Convert ``?`` placeholders to ``$1, $2, ...`` for asyncpg."""
    counter = 0

    def _replace(_match: re.Match[str]) -> str:
        nonlocal counter
        counter += 1
        return f"${counter}"

    return _PLACEHOLDER_RE.sub(_replace, sql)


class PostgresRow:
    """Wraps asyncpg.Record to satisfy the Row protocol."""

    def __init__(self, record: asyncpg.Record) -> None:
        """Initialize with an asyncpg Record."""
        self._record = record

    def __getitem__(self, key: str | int) -> Any:
        """Get a column value by name or position."""
        return self._record[key]

    def keys(self) -> list[str]:
        """Return column names."""
        return list(self._record.keys())


class PostgresCursor:
    """Wraps a list of asyncpg.Record as a Cursor.

    asyncpg returns results eagerly — there's no server-side cursor for
    simple queries. This wraps the result list to match the Cursor protocol.
    """

    def __init__(self, rows: list[asyncpg.Record], status: str | None = None) -> None:
        """Initialize with result rows and optional status string."""
        self._rows = rows
        self._index = 0
        self._rowcount = self._parse_rowcount(status)

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last operation."""
        return self._rowcount

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        if self._index >= len(self._rows):
            return None
        row = PostgresRow(self._rows[self._index])
        self._index += 1
        return row

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        remaining: list[Row] = [PostgresRow(r) for r in self._rows[self._index :]]
        self._index = len(self._rows)
        return remaining

    @staticmethod
    def _parse_rowcount(status: str | None) -> int:
        """Parse affected row count from asyncpg status string.

        Examples: "INSERT 0 1" → 1, "UPDATE 3" → 3, "DELETE 0" → 0.
        """
        if not status:
            return -1
        parts = status.split()
        if len(parts) >= 2:
            try:
                return int(parts[-1])
            except ValueError:
                pass
        return -1


class PostgresConnection:
    """Database protocol over one pinned asyncpg connection.

    Used for the body of a transaction so every statement runs on the same
    connection. ``commit()`` is a no-op; the enclosing transaction commits.
    """

    def __init__(self, conn: asyncpg.Connection) -> None:
        """Initialize with an acquired asyncpg connection."""
        self._conn = conn

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        pg_sql = _translate_placeholders(sql)
        try:
            # asyncpg.fetch returns list of Records for SELECT / RETURNING
            # asyncpg.execute returns status string for INSERT/UPDATE/DELETE
            stmt = await self._conn.prepare(pg_sql)
            if stmt.get_attributes():
                rows = await self._conn.fetch(pg_sql, *params)
                return PostgresCursor(rows)
            status = await self._conn.execute(pg_sql, *params)
            return PostgresCursor([], status=status)
        except asyncpg.IntegrityConstraintViolationError as e:
            raise ConstraintViolation(str(e)) from e
        except asyncpg.PostgresError as e:
            raise PersistenceFailure(str(e)) from e

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements."""
        try:
            await self._conn.execute(sql)
        except asyncpg.PostgresError as e:
            raise PersistenceFailure(str(e)) from e

    async def commit(self) -> None:
        """No-op — the enclosing transaction block commits."""

    async def close(self) -> None:
        """No-op — the pool owns the connection."""

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresConnection]:
        """Nested transaction (savepoint) on the pinned connection."""
        async with self._conn.transaction():
            yield self

    async def ensure_tables(self, config: VersioningConfig) -> None:
        """Create the record and version tables for a registered type."""
        for statement in record_tables_sql(config, dialect="postgres"):
            await self.executescript(statement)

    async def sync_id_sequence(self, table: str) -> None:
        """Advance the serial sequence to the largest id in ``table``."""
        await self.execute(
            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'),"  # noqa: S608
            f" (SELECT MAX(id) FROM {table}))"
        )


class PostgresBackend:
    """PostgreSQL implementation of the Database protocol.

    Each ``execute()`` call acquires a connection from the pool, translates
    ``?`` → ``$N`` placeholders, and releases the connection after.
    ``commit()`` is a no-op — asyncpg auto-commits each statement outside
    ``transaction()``.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        """Initialize with an asyncpg connection pool."""
        self._pool = pool

    @classmethod
    async def create(cls, url: str) -> PostgresBackend:
        """Create a PostgresBackend from a connection URL."""
        pool = await asyncpg.create_pool(url, min_size=2, max_size=10)
        return cls(pool)

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        async with self._pool.acquire() as conn:
            return await PostgresConnection(conn).execute(sql, params)

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements."""
        async with self._pool.acquire() as conn:
            await PostgresConnection(conn).executescript(sql)

    async def commit(self) -> None:
        """No-op — asyncpg auto-commits each statement."""

    async def close(self) -> None:
        """Close the connection pool."""
        await self._pool.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresConnection]:
        """Pin one pooled connection and run the block in a transaction on it."""
        async with self._pool.acquire() as conn:
            try:
                async with conn.transaction():
                    yield PostgresConnection(conn)
            except asyncpg.PostgresError as e:
                # Commit-time failures (deferred constraints, serialization).
                raise PersistenceFailure(str(e)) from e

    async def ensure_tables(self, config: VersioningConfig) -> None:
        """Create the record and version tables for a registered type."""
        async with self._pool.acquire() as conn:
            await PostgresConnection(conn).ensure_tables(config)

    async def sync_id_sequence(self, table: str) -> None:
        """Advance the serial sequence to the largest id in ``table``."""
        async with self._pool.acquire() as conn:
            await PostgresConnection(conn).sync_id_sequence(table)
