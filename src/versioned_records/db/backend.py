"""Database backend protocol — thin abstraction over async DB connections.

The versioning engine programs against these protocols. Each backend
(SQLite, Postgres) provides a concrete implementation. SQL dialect
differences are handled inside the backend, not in the engine.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from versioned_records.registry import VersioningConfig


@runtime_checkable
class Row(Protocol):
    """A database row supporting both named and positional access."""

    def __getitem__(self, key: str | int) -> Any:
        """Get a column value by name or position."""
        ...

    def keys(self) -> Any:
        """Return column names."""
        ...


@runtime_checkable
class Cursor(Protocol):
    """Async cursor returned by Database.execute()."""

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last operation."""
        ...

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        ...

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        ...


@runtime_checkable
class Database(Protocol):
    """Async database backend.

    All engine SQL uses ``?`` placeholders and SQLite-flavored syntax.
    Non-SQLite backends translate at execute time (``?`` → ``$N``).
    Driver errors surface as ``PersistenceFailure`` (``ConstraintViolation``
    for integrity errors), never as driver-specific exceptions.
    """

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        ...

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements (DDL)."""
        ...

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def close(self) -> None:
        """Close the database connection."""
        ...

    def transaction(self) -> AbstractAsyncContextManager[Database]:
        """Run the enclosed statements atomically.

        Yields a Database bound to the transaction. Commits on normal exit,
        rolls back and re-raises on any exception. Calling ``transaction()``
        on the yielded Database nests as a savepoint.
        """
        ...

    async def ensure_tables(self, config: VersioningConfig) -> None:
        """Create the record and version tables for a registered type."""
        ...

    async def sync_id_sequence(self, table: str) -> None:
        """Move the table's id generator past any explicitly inserted id."""
        ...
