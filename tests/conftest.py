"""Shared test fixtures."""

from unittest.mock import AsyncMock

import pytest_asyncio

import tests.records  # noqa: F401  registers the shared record types
from versioned_records.db.connection import create_connection
from versioned_records.store.record_store import RecordStore
from versioned_records.store.version_store import VersionStore


@pytest_asyncio.fixture
async def db():
    """In-memory database with tables for every registered record type."""
    conn = await create_connection(":memory:")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def side_effect():
    """Post-save side effect that records its calls."""
    return AsyncMock(return_value=None)


@pytest_asyncio.fixture
async def store(db, side_effect):
    """Record store backed by in-memory DB, with one tracked side effect."""
    return RecordStore(db, side_effects=[side_effect])


@pytest_asyncio.fixture
async def versions(db):
    """Version history reader backed by in-memory DB."""
    return VersionStore(db)
