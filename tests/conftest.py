"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from tasknest.adapters.sqlite.connection import create_connection
from tasknest.adapters.sqlite.user_manager import create_user


class FakeClock:
    """Deterministic clock: each call returns a moment one second later."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 5, 15, 12, 0, tzinfo=UTC)  # a Wednesday

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_logger(tmp_path):
    """Send the application log to a temporary directory."""
    import tasknest.utils.logger as logger_mod

    logger_mod._logger = None
    with patch("tasknest.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    if logger_mod._logger is not None:
        for handler in list(logger_mod._logger.handlers):
            handler.close()
            logger_mod._logger.removeHandler(handler)
    logger_mod._logger = None


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def connection():
    """In-memory database with all migrations applied."""
    conn = create_connection(":memory:")
    yield conn
    conn.close()


@pytest.fixture()
def owner(connection):
    """A user (with Inbox) and its API token."""
    user, token = create_user(connection, "alice@example.com", "Alice")
    return user, token


@pytest.fixture()
def other_owner(connection):
    user, token = create_user(connection, "bob@example.com", "Bob")
    return user, token


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    The cached instance is the one every module sees through get_config_service.
    """
    from tasknest.services.config_service import get_config_service

    tmpdir = str(tmp_path / "config")
    get_config_service.cache_clear()
    with patch("tasknest.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("tasknest.services.config_service.user_data_dir", return_value=tmpdir):
            yield get_config_service()
    get_config_service.cache_clear()
