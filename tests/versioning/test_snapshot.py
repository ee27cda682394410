"""Tests for attribute snapshots."""

from datetime import UTC, datetime

from tests.records import HtmlBlock, Page
from versioned_records.registry import get_config
from versioned_records.versioning.snapshot import snapshot_attributes, snapshot_mapping


def test_snapshot_excludes_bookkeeping_columns():
    block = HtmlBlock(
        id=3,
        name="Snap",
        content="body",
        version=4,
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC),
    )
    snapshot = snapshot_attributes(block, get_config(HtmlBlock).non_versioned_columns)
    assert snapshot == {"name": "Snap", "content": "body"}


def test_snapshot_excludes_per_type_columns():
    page = Page(title="T", path="/t", published=True, view_count=5)
    snapshot = snapshot_attributes(page, get_config(Page).non_versioned_columns)
    assert snapshot == {"title": "T", "path": "/t"}


def test_snapshot_does_not_mutate_record():
    block = HtmlBlock(id=1, name="Pure")
    snapshot_attributes(block, ("id",))
    assert block.id == 1
    assert block.name == "Pure"


def test_snapshot_mapping_filters_loaded_attributes():
    loaded = {"id": 1, "original_record_id": 1, "name": "x", "version": 2}
    assert snapshot_mapping(loaded, ("id", "original_record_id", "version")) == {"name": "x"}
