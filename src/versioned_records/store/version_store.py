"""Version history operations."""

from versioned_records.db.backend import Database
from versioned_records.db.queries import count_versions, get_version, latest_version, list_versions
from versioned_records.models.record import VersionedRecord
from versioned_records.models.version import RecordVersion
from versioned_records.registry import get_config


class VersionStore:
    """Read access to record version history."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def get_versions(
        self, record_type: type[VersionedRecord], record_id: int
    ) -> list[RecordVersion]:
        """Get all versions of a record, ordered by version number."""
        return await list_versions(self.db, get_config(record_type), record_id)

    async def get_latest_version(
        self, record_type: type[VersionedRecord], record_id: int
    ) -> RecordVersion | None:
        """Get the latest version of a record."""
        return await latest_version(self.db, get_config(record_type), record_id)

    async def get_version(
        self, record_type: type[VersionedRecord], record_id: int, number: int
    ) -> RecordVersion | None:
        """Get a record as it was at version ``number``."""
        return await get_version(self.db, get_config(record_type), record_id, number)

    async def count_versions(self, record_type: type[VersionedRecord], record_id: int) -> int:
        """Count the versions stored for a record."""
        return await count_versions(self.db, get_config(record_type), record_id)
