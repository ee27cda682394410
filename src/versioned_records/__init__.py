"""Record versioning: snapshot history for persisted records."""

from versioned_records.errors import (
    ConstraintViolation,
    PersistenceFailure,
    SequencingInconsistency,
    ValidationFailure,
    VersioningError,
)
from versioned_records.models.record import VersionedRecord
from versioned_records.models.version import RecordVersion
from versioned_records.registry import VERSION_FOREIGN_KEY, VersioningConfig, get_config, versioned
from versioned_records.store.record_store import RecordStore, SaveOutcome, SaveResult
from versioned_records.store.version_store import VersionStore

__all__ = [
    "VERSION_FOREIGN_KEY",
    "ConstraintViolation",
    "PersistenceFailure",
    "RecordStore",
    "RecordVersion",
    "SaveOutcome",
    "SaveResult",
    "SequencingInconsistency",
    "ValidationFailure",
    "VersionStore",
    "VersionedRecord",
    "VersioningConfig",
    "VersioningError",
    "get_config",
    "versioned",
]
