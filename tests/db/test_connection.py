"""Tests for database connection and schema initialization."""

from unittest.mock import patch

import pytest

from tests.records import HtmlBlock
from versioned_records.db.connection import create_connection
from versioned_records.db.schema import record_tables_sql
from versioned_records.registry import get_config


@pytest.mark.asyncio
async def test_create_in_memory_connection():
    db = await create_connection(":memory:")
    try:
        cursor = await db.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
        tables = {row[0] for row in await cursor.fetchall()}
        assert "html_blocks" in tables
        assert "html_block_versions" in tables
        assert "pages" in tables
        assert "page_versions" in tables
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_version_table_has_foreign_key_column():
    db = await create_connection(":memory:")
    try:
        cursor = await db.execute("PRAGMA table_info(html_block_versions)")
        columns = {row[1] for row in await cursor.fetchall()}
        assert "original_record_id" in columns
        assert {"id", "version", "data", "version_comment", "created_at"} <= columns
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_file_database_created_under_db_path(tmp_path):
    path = tmp_path / "nested" / "records.db"
    with patch.dict("os.environ", {"VR_DB_PATH": str(path)}, clear=True):
        db = await create_connection()
    try:
        assert path.exists()
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_ensure_tables_is_idempotent(db):
    await db.ensure_tables(get_config(HtmlBlock))
    await db.ensure_tables(get_config(HtmlBlock))


def test_postgres_ddl_uses_bigserial():
    statements = record_tables_sql(get_config(HtmlBlock), dialect="postgres")
    assert len(statements) == 3
    assert "BIGSERIAL PRIMARY KEY" in statements[0]
    assert "original_record_id BIGINT NOT NULL REFERENCES html_blocks(id)" in statements[1]
    assert "UNIQUE(original_record_id, version)" in statements[1]


def test_unknown_dialect():
    with pytest.raises(ValueError, match="Unsupported dialect"):
        record_tables_sql(get_config(HtmlBlock), dialect="oracle")
