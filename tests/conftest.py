"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator

import logfire
import pytest

from src.core.config import Settings
from src.core.db_client import close_connection
from src.core.schema import init_db


@pytest.fixture(scope="session", autouse=True)
def _configure_logfire_for_tests() -> None:
    """Keep spans local and quiet during the test run."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file, ignoring any .env file."""
    return Settings(
        _env_file=None,
        pantry_backend="sqlite",
        sqlite_db_path=str(tmp_path / "pantry.db"),
        logfire_token=None,
    )


@pytest.fixture
async def sqlite_db(test_settings: Settings) -> AsyncGenerator[str]:
    """Initialized SQLite database; yields its path and closes the connection afterwards."""
    await init_db(db_path=test_settings.sqlite_db_path)
    yield test_settings.sqlite_db_path
    await close_connection(db_path=test_settings.sqlite_db_path)
