"""Persistence collaborator: backends, schema and queries."""

from versioned_records.db.backend import Cursor, Database, Row
from versioned_records.db.sqlite_backend import SQLiteBackend

__all__ = ["Cursor", "Database", "Row", "SQLiteBackend"]
