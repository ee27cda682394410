"""Query helpers for record and version rows.

Write helpers never commit; callers run them inside ``db.transaction()``.
Table names come from a registered ``VersioningConfig`` and are validated
identifiers, so interpolating them into SQL is safe.
"""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from versioned_records.db.backend import Database, Row
from versioned_records.errors import PersistenceFailure
from versioned_records.models.record import VersionedRecord
from versioned_records.models.version import RecordVersion
from versioned_records.registry import VersioningConfig

# Record fields stored in their own columns rather than in ``data``.
RECORD_COLUMNS = ("id", "version", "created_at", "updated_at")


@dataclass
class StoredRecord:
    """A record row as currently persisted."""

    id: int
    version: int
    data: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @property
    def attributes(self) -> dict[str, Any]:
        """Every attribute, JSON-normalized like ``model_dump(mode="json")``."""
        return {
            **self.data,
            "id": self.id,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def row_to_stored(row: Row) -> StoredRecord:
    """Convert a record row to a StoredRecord."""
    return StoredRecord(
        id=row["id"],
        version=row["version"],
        data=json.loads(row["data"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def row_to_version(row: Row, config: VersioningConfig) -> RecordVersion:
    """Convert a version row to a RecordVersion."""
    return RecordVersion(
        id=row["id"],
        record_type=config.record_type,
        original_record_id=row[config.version_foreign_key],
        version=row["version"],
        data=json.loads(row["data"]),
        version_comment=row["version_comment"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _record_data(record: VersionedRecord) -> str:
    return json.dumps(record.model_dump(mode="json", exclude=set(RECORD_COLUMNS)))


async def load_prior_state(
    db: Database, config: VersioningConfig, record_id: int
) -> StoredRecord | None:
    """Load the persisted row for a record, or None if it was never stored."""
    cursor = await db.execute(
        f"SELECT id, version, data, created_at, updated_at FROM {config.table}"  # noqa: S608
        " WHERE id = ?",
        (record_id,),
    )
    row = await cursor.fetchone()
    return row_to_stored(row) if row else None


async def insert_record(db: Database, config: VersioningConfig, record: VersionedRecord) -> int:
    """Insert a record row and return its id.

    A record carrying its own id is inserted under that id, and the table's
    id generator is moved past it so later auto-assigned ids cannot collide.
    """
    created_at = (record.created_at or datetime.now(UTC)).isoformat()
    updated_at = (record.updated_at or datetime.now(UTC)).isoformat()
    if record.id is None:
        cursor = await db.execute(
            f"INSERT INTO {config.table} (version, data, created_at, updated_at)"  # noqa: S608
            " VALUES (?, ?, ?, ?) RETURNING id",
            (record.version, _record_data(record), created_at, updated_at),
        )
    else:
        cursor = await db.execute(
            f"INSERT INTO {config.table} (id, version, data, created_at, updated_at)"  # noqa: S608
            " VALUES (?, ?, ?, ?, ?) RETURNING id",
            (record.id, record.version, _record_data(record), created_at, updated_at),
        )
    row = await cursor.fetchone()
    if row is None:
        raise PersistenceFailure(f"Insert into {config.table} returned no id")
    if record.id is not None:
        await db.sync_id_sequence(config.table)
    return row[0]


async def update_record(db: Database, config: VersioningConfig, record: VersionedRecord) -> None:
    """Overwrite a record row with the record's current state."""
    updated_at = (record.updated_at or datetime.now(UTC)).isoformat()
    cursor = await db.execute(
        f"UPDATE {config.table} SET version = ?, data = ?, updated_at = ?"  # noqa: S608
        " WHERE id = ?",
        (record.version, _record_data(record), updated_at, record.id),
    )
    if cursor.rowcount == 0:
        raise PersistenceFailure(f"{config.record_type} {record.id} not found for update")


async def insert_version(db: Database, config: VersioningConfig, version: RecordVersion) -> int:
    """Insert a version row and return its id."""
    fk = config.version_foreign_key
    cursor = await db.execute(
        f"INSERT INTO {config.version_table}"  # noqa: S608
        f" ({fk}, version, data, version_comment, created_at)"
        " VALUES (?, ?, ?, ?, ?) RETURNING id",
        (
            version.original_record_id,
            version.version,
            json.dumps(version.data),
            version.version_comment,
            (version.created_at or datetime.now(UTC)).isoformat(),
        ),
    )
    row = await cursor.fetchone()
    if row is None:
        raise PersistenceFailure(f"Insert into {config.version_table} returned no id")
    return row[0]


_VERSION_SELECT = "SELECT id, {fk}, version, data, version_comment, created_at FROM {table}"


def _version_select(config: VersioningConfig) -> str:
    return _VERSION_SELECT.format(fk=config.version_foreign_key, table=config.version_table)


async def list_versions(
    db: Database, config: VersioningConfig, record_id: int
) -> list[RecordVersion]:
    """All versions of a record, ascending by version number."""
    cursor = await db.execute(
        _version_select(config)
        + f" WHERE {config.version_foreign_key} = ? ORDER BY version",
        (record_id,),
    )
    rows = await cursor.fetchall()
    return [row_to_version(row, config) for row in rows]


async def get_version(
    db: Database, config: VersioningConfig, record_id: int, number: int
) -> RecordVersion | None:
    """A single version of a record by number."""
    cursor = await db.execute(
        _version_select(config)
        + f" WHERE {config.version_foreign_key} = ? AND version = ?",
        (record_id, number),
    )
    row = await cursor.fetchone()
    return row_to_version(row, config) if row else None


async def latest_version(
    db: Database, config: VersioningConfig, record_id: int
) -> RecordVersion | None:
    """The highest-numbered version of a record."""
    cursor = await db.execute(
        _version_select(config)
        + f" WHERE {config.version_foreign_key} = ? ORDER BY version DESC LIMIT 1",
        (record_id,),
    )
    row = await cursor.fetchone()
    return row_to_version(row, config) if row else None


async def count_versions(db: Database, config: VersioningConfig, record_id: int) -> int:
    """Number of versions stored for a record."""
    cursor = await db.execute(
        f"SELECT COUNT(*) FROM {config.version_table}"  # noqa: S608
        f" WHERE {config.version_foreign_key} = ?",
        (record_id,),
    )
    row = await cursor.fetchone()
    if row is None:
        raise RuntimeError("COUNT query returned no rows")
    return row[0]
