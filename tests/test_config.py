"""Tests for environment-based configuration."""

import logging
from pathlib import Path
from unittest.mock import patch

from versioned_records.config import (
    configure_logging,
    get_database_url,
    get_db_path,
    get_log_level,
)


def test_defaults():
    with patch.dict("os.environ", {}, clear=True):
        assert get_database_url() is None
        assert get_log_level() == "WARNING"
        assert get_db_path().name == "records.db"


def test_overrides():
    env = {
        "VR_DB_PATH": "/tmp/history.db",
        "VR_DATABASE_URL": "postgresql://localhost/records",
        "VR_LOG_LEVEL": "DEBUG",
    }
    with patch.dict("os.environ", env, clear=True):
        assert get_db_path() == Path("/tmp/history.db")
        assert get_database_url() == "postgresql://localhost/records"
        assert get_log_level() == "DEBUG"


def test_empty_database_url_is_unset():
    with patch.dict("os.environ", {"VR_DATABASE_URL": ""}, clear=True):
        assert get_database_url() is None


def test_configure_logging_uses_level():
    with (
        patch.dict("os.environ", {"VR_LOG_LEVEL": "info"}, clear=True),
        patch("logging.basicConfig") as basic_config,
    ):
        configure_logging()
    assert basic_config.call_args.kwargs["level"] == logging.INFO
