"""Snapshotting, change detection, sequencing and version construction."""

from versioned_records.versioning.changes import changed_attributes, has_changes
from versioned_records.versioning.factory import build_version
from versioned_records.versioning.sequencer import check_sequence, next_version_number
from versioned_records.versioning.snapshot import snapshot_attributes, snapshot_mapping

__all__ = [
    "build_version",
    "changed_attributes",
    "check_sequence",
    "has_changes",
    "next_version_number",
    "snapshot_attributes",
    "snapshot_mapping",
]
