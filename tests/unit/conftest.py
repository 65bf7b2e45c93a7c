"""Pytest configuration and fixtures for unit tests."""

import pytest

from src.domain.pantry import PantryItemStatus
from tests.unit.mocks import InMemoryDBClient, InMemoryPantryRepository, make_item


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches src.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("src.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("src.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("src.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("src.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("src.core.db_client.list_records", in_memory_db.list_records)

    return in_memory_db


@pytest.fixture
def fake_repository():
    """Provides an empty InMemoryPantryRepository."""
    return InMemoryPantryRepository()


@pytest.fixture
def stocked_repository():
    """Repository holding three items, newest first: Milk, Eggs (out), Rice (low)."""
    return InMemoryPantryRepository(
        [
            make_item("1", "Milk", PantryItemStatus.FULL, minutes_ago=0),
            make_item("2", "Eggs", PantryItemStatus.OUT_OF_STOCK, minutes_ago=5),
            make_item("3", "Rice", PantryItemStatus.RUNNING_LOW, minutes_ago=10),
        ]
    )

