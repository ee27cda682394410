"""Tests for version number assignment."""

import pytest

from versioned_records.errors import SequencingInconsistency
from versioned_records.models.version import RecordVersion
from versioned_records.versioning.sequencer import check_sequence, next_version_number


def _versions(*numbers: int) -> list[RecordVersion]:
    return [
        RecordVersion(record_type="HtmlBlock", original_record_id=1, version=n) for n in numbers
    ]


def test_empty_history_starts_at_one():
    assert next_version_number([]) == 1


def test_next_is_max_plus_one():
    assert next_version_number(_versions(1, 2, 3)) == 4


def test_out_of_order_history_uses_max():
    assert next_version_number(_versions(2, 5, 1)) == 6


def test_check_sequence_accepts_free_number():
    check_sequence(_versions(1, 2), 3)


def test_check_sequence_rejects_collision():
    with pytest.raises(SequencingInconsistency, match="Version 2 already exists for record 1"):
        check_sequence(_versions(1, 2), 2)
