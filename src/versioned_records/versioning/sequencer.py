"""Version number assignment."""

from collections.abc import Sequence

from versioned_records.errors import SequencingInconsistency
from versioned_records.models.version import RecordVersion


def next_version_number(versions: Sequence[RecordVersion]) -> int:
    """Return the number the next snapshot gets: highest stored plus one."""
    return max((v.version for v in versions), default=0) + 1


def check_sequence(versions: Sequence[RecordVersion], number: int) -> None:
    """Raise if ``number`` is already taken in ``versions``."""
    for v in versions:
        if v.version == number:
            raise SequencingInconsistency(
                f"Version {number} already exists for record {v.original_record_id}"
            )
