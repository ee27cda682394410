"""Attribute snapshots: a record's versioned attributes as a plain mapping."""

from collections.abc import Iterable, Mapping
from typing import Any

from versioned_records.models.record import VersionedRecord


def snapshot_mapping(
    attributes: Mapping[str, Any], non_versioned_columns: Iterable[str]
) -> dict[str, Any]:
    """Drop the non-versioned names from an attribute mapping."""
    excluded = set(non_versioned_columns)
    return {name: value for name, value in attributes.items() if name not in excluded}


def snapshot_attributes(
    record: VersionedRecord, non_versioned_columns: Iterable[str]
) -> dict[str, Any]:
    """Return the record's versioned attributes, JSON-normalized.

    Values go through ``model_dump(mode="json")`` so the result compares
    equal to what a storage round trip gives back.
    """
    return snapshot_mapping(record.model_dump(mode="json"), non_versioned_columns)
