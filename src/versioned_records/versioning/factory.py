"""Construction of version snapshots from live records."""

from datetime import UTC, datetime

from versioned_records.models.record import VersionedRecord
from versioned_records.models.version import RecordVersion
from versioned_records.registry import VersioningConfig
from versioned_records.versioning.snapshot import snapshot_attributes


def build_version(
    record: VersionedRecord,
    number: int,
    config: VersioningConfig,
    *,
    comment: str | None = None,
    now: datetime | None = None,
) -> RecordVersion:
    """Build, but do not persist, version ``number`` of ``record``."""
    if record.id is None:
        raise ValueError(f"Cannot version an unsaved {config.record_type}")
    return RecordVersion(
        record_type=config.record_type,
        original_record_id=record.id,
        version=number,
        data=snapshot_attributes(record, config.non_versioned_columns),
        version_comment=comment,
        created_at=now or datetime.now(UTC),
    )
