"""Environment-variable-based configuration."""

import logging
import os
import sys
from pathlib import Path


def get_db_path() -> Path:
    """Return the SQLite database file path from VR_DB_PATH."""
    raw = os.environ.get("VR_DB_PATH", "~/.local/share/versioned_records/records.db")
    return Path(raw).expanduser()


def get_database_url() -> str | None:
    """Return the database URL from VR_DATABASE_URL, if set."""
    return os.environ.get("VR_DATABASE_URL") or None


def get_log_level() -> str:
    """Return the logging level from VR_LOG_LEVEL."""
    return os.environ.get("VR_LOG_LEVEL", "WARNING")


def configure_logging() -> None:
    """Send package logs to stderr at the configured level."""
    logging.basicConfig(
        level=getattr(logging, get_log_level().upper()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
