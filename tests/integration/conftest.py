"""Pytest configuration and fixtures for integration tests against PocketBase."""

import asyncio
import logging
import shutil
import subprocess
import tempfile
import time
from collections.abc import Generator

import pytest
from pocketbase import PocketBase

from src.core.config import Settings
from src.core.schema import COLLECTIONS, sync_schema


logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@test.local"
ADMIN_PASSWORD = "testpassword123"


@pytest.fixture(scope="session")
def pocketbase_server() -> Generator[str]:
    """Start ephemeral PocketBase instance for testing."""
    pb_binary = shutil.which("pocketbase")

    if pb_binary is None:
        pytest.skip("PocketBase binary not found in PATH")

    pb_data_dir = tempfile.mkdtemp(prefix="pb_test_")
    process = subprocess.Popen(
        [pb_binary, "serve", "--dir", pb_data_dir, "--http", "127.0.0.1:8091"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    pb_url = "http://127.0.0.1:8091"
    max_wait = 10  # seconds
    start_time = time.time()

    # Wait for PocketBase to be ready
    while time.time() - start_time < max_wait:
        try:
            PocketBase(pb_url).health.check()
            break
        except Exception:
            time.sleep(0.5)
    else:
        process.kill()
        shutil.rmtree(pb_data_dir, ignore_errors=True)
        pytest.fail("PocketBase failed to start within 10 seconds")

    try:
        subprocess.run(
            [pb_binary, "superuser", "upsert", ADMIN_EMAIL, ADMIN_PASSWORD, "--dir", pb_data_dir],
            check=True,
            capture_output=True,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"Failed to create admin user: {e.stderr}")
        process.kill()
        shutil.rmtree(pb_data_dir, ignore_errors=True)
        pytest.fail(f"Failed to create admin user: {e.stderr}")

    yield pb_url

    process.kill()
    process.wait()
    shutil.rmtree(pb_data_dir, ignore_errors=True)


@pytest.fixture(scope="session")
def pocketbase_settings(pocketbase_server: str) -> Settings:
    """Settings pointing the pantry at the ephemeral PocketBase."""
    return Settings(
        _env_file=None,
        pantry_backend="pocketbase",
        pocketbase_url=pocketbase_server,
        pocketbase_admin_email=ADMIN_EMAIL,
        pocketbase_admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture(scope="session")
def initialized_pocketbase(pocketbase_server: str) -> PocketBase:
    """Sync the pantry schema and return a client for direct inspection."""
    asyncio.run(sync_schema(pocketbase_url=pocketbase_server, admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD))
    return PocketBase(pocketbase_server)


@pytest.fixture
def clean_pocketbase(initialized_pocketbase: PocketBase) -> PocketBase:
    """Empty every collection before the test runs."""
    for collection in COLLECTIONS:
        for record in initialized_pocketbase.collection(collection).get_full_list():
            initialized_pocketbase.collection(collection).delete(record.id)
    return initialized_pocketbase
