"""Pure Python in-memory stand-ins for the remote pantry store."""

import asyncio
import copy
from datetime import UTC, datetime, timedelta
from typing import Any

from src.core.db_client import DatabaseError, RecordNotFoundError
from src.core.errors import RemoteOperationError
from src.domain.create_models import PantryItemCreate
from src.domain.pantry import PantryItem, PantryItemStatus


class InMemoryDBClient:
    """Pure Python in-memory database for unit testing.

    Mirrors the src.core.db_client function signatures so it can be patched
    over the module. Records get an integer-like string id and a created_at
    timestamp that strictly increases with each insert.
    """

    def __init__(self):
        """Initialize empty in-memory database."""
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._id_counter = 1000
        self._clock = datetime(2026, 1, 1, tzinfo=UTC)

    def _next_timestamp(self) -> str:
        self._clock += timedelta(milliseconds=1)
        return self._clock.isoformat().replace("+00:00", "Z")

    async def create_record(
        self, *, collection: str, data: dict[str, Any], db_path: str | None = None
    ) -> dict[str, Any]:
        """Create a new record in the specified collection.

        Raises:
            DatabaseError: If data is not a dictionary
        """
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        records = self._collections.setdefault(collection, {})
        record_id = str(self._id_counter)
        self._id_counter += 1

        record = {"id": record_id, "created_at": self._next_timestamp(), **data}
        records[record_id] = record
        return copy.deepcopy(record)

    async def get_record(self, *, collection: str, record_id: str, db_path: str | None = None) -> dict[str, Any]:
        """Get a record by ID from the specified collection.

        Raises:
            RecordNotFoundError: If record not found
        """
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        return copy.deepcopy(records[record_id])

    async def update_record(
        self, *, collection: str, record_id: str, data: dict[str, Any], db_path: str | None = None
    ) -> None:
        """Update an existing record.

        Raises:
            RecordNotFoundError: If record not found
        """
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        records[record_id].update(data)

    async def delete_record(self, *, collection: str, record_id: str, db_path: str | None = None) -> None:
        """Delete a record from the collection.

        Raises:
            RecordNotFoundError: If record not found
        """
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        del records[record_id]

    async def list_records(
        self, *, collection: str, sort: str = "", db_path: str | None = None
    ) -> list[dict[str, Any]]:
        """List records, sorted by comma-separated ``field [ASC|DESC]`` terms."""
        records = list(self._collections.get(collection, {}).values())
        if sort:
            records = self._apply_sort(records, sort)
        return [copy.deepcopy(r) for r in records]

    def _apply_sort(self, records: list[dict], sort: str) -> list[dict]:
        """Sort records by each term, last term first so earlier terms take priority."""
        for term in reversed([t.strip() for t in sort.split(",")]):
            field, _, direction = term.partition(" ")
            reverse = direction.strip().upper() == "DESC"
            records = sorted(records, key=lambda r, f=field: self._sort_key(r.get(f)), reverse=reverse)
        return records

    @staticmethod
    def _sort_key(value: Any) -> tuple[int, Any]:
        if isinstance(value, str) and value.isdigit():
            return (0, int(value))
        return (1, "" if value is None else str(value))


class InMemoryPantryRepository:
    """Fake PantryRepository with call recording, failure injection and a gate.

    Set ``fail_on`` to operation names ("fetch_all", "create", "update_status",
    "delete") that should raise RemoteOperationError. Clear ``gate`` to hold
    every remote call in flight until it is set again. An Event in
    ``held_responses["create"]`` holds the create response after the row is stored.
    """

    def __init__(self, items: list[PantryItem] | None = None):
        self.rows: dict[str, PantryItem] = {item.id: item for item in items or []}
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: set[str] = set()
        self.gate = asyncio.Event()
        self.gate.set()
        self.held_responses: dict[str, asyncio.Event] = {}
        self._next_id = 1
        self._clock = datetime(2026, 1, 1, tzinfo=UTC)

    async def _remote(self, operation: str, argument: Any = None) -> None:
        self.calls.append((operation, argument))
        await self.gate.wait()
        if operation in self.fail_on:
            raise RemoteOperationError(f"connection refused during {operation}", operation=operation)

    async def fetch_all(self) -> list[PantryItem]:
        await self._remote("fetch_all")
        return sorted(self.rows.values(), key=lambda item: item.created_at, reverse=True)

    async def create(self, payload: PantryItemCreate) -> PantryItem:
        await self._remote("create", payload)
        self._clock += timedelta(seconds=1)
        while str(self._next_id) in self.rows:
            self._next_id += 1
        item = PantryItem(id=str(self._next_id), name=payload.name, status=payload.status, created_at=self._clock)
        self.rows[item.id] = item
        if "create" in self.held_responses:
            await self.held_responses["create"].wait()
        return item

    async def update_status(self, item_id: str, status: PantryItemStatus) -> None:
        await self._remote("update_status", (item_id, status))
        if item_id in self.rows:
            self.rows[item_id] = self.rows[item_id].model_copy(update={"status": status})

    async def delete(self, item_id: str) -> None:
        await self._remote("delete", item_id)
        self.rows.pop(item_id, None)


def make_item(
    item_id: str,
    name: str | None = None,
    status: PantryItemStatus = PantryItemStatus.FULL,
    *,
    minutes_ago: int = 0,
) -> PantryItem:
    """Build a PantryItem with a created_at offset from a fixed reference time."""
    created_at = datetime(2026, 6, 1, 12, 0, tzinfo=UTC) - timedelta(minutes=minutes_ago)
    return PantryItem(id=item_id, name=name or f"Item {item_id}", status=status, created_at=created_at)
