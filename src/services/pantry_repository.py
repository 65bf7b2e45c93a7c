"""Remote store access for the pantry_items table.

``PantryRepository`` is the narrow interface the store talks to. Every
implementation translates backend failures into ``RemoteOperationError``.
"""

import asyncio
import logging
from typing import Any, Protocol

import httpx
from pocketbase import PocketBase
from pocketbase.client import ClientResponseError
from pydantic import ValidationError

from src.core import db_client
from src.core.config import Settings, constants, settings
from src.core.errors import RemoteOperationError
from src.core.logging import span
from src.domain.create_models import PantryItemCreate
from src.domain.pantry import PantryItem, PantryItemStatus
from src.domain.update_models import PantryItemStatusUpdate


logger = logging.getLogger(__name__)


class PantryRepository(Protocol):
    """Operations the pantry store needs from the remote table."""

    async def fetch_all(self) -> list[PantryItem]:
        """Return every item, newest first."""
        ...

    async def create(self, payload: PantryItemCreate) -> PantryItem:
        """Insert one item and return the stored row."""
        ...

    async def update_status(self, item_id: str, status: PantryItemStatus) -> None:
        """Set the status of the item with ``item_id``."""
        ...

    async def delete(self, item_id: str) -> None:
        """Delete the item with ``item_id``."""
        ...


def _to_item(record: dict[str, Any], *, operation: str) -> PantryItem:
    """Validate a raw row as a PantryItem."""
    try:
        return PantryItem.model_validate(record)
    except ValidationError as e:
        msg = f"Invalid row in {constants.PANTRY_TABLE}: {e}"
        raise RemoteOperationError(msg, operation=operation) from e


class SQLitePantryRepository:
    """pantry_items table stored in SQLite through db_client."""

    collection = constants.PANTRY_TABLE

    def __init__(self, db_path: str | None = None) -> None:
        self._db_path = db_path

    async def fetch_all(self) -> list[PantryItem]:
        with span("pantry_repository.sqlite.fetch_all"):
            records = await db_client.list_records(
                collection=self.collection,
                sort=constants.PANTRY_FETCH_SORT,
                db_path=self._db_path,
            )
            return [_to_item(record, operation="fetch_all") for record in records]

    async def create(self, payload: PantryItemCreate) -> PantryItem:
        with span("pantry_repository.sqlite.create"):
            record = await db_client.create_record(
                collection=self.collection,
                data=payload.model_dump(mode="json"),
                db_path=self._db_path,
            )
            return _to_item(record, operation="create")

    async def update_status(self, item_id: str, status: PantryItemStatus) -> None:
        with span("pantry_repository.sqlite.update_status"):
            update = PantryItemStatusUpdate(status=status)
            await db_client.update_record(
                collection=self.collection,
                record_id=item_id,
                data=update.model_dump(mode="json"),
                db_path=self._db_path,
            )

    async def delete(self, item_id: str) -> None:
        with span("pantry_repository.sqlite.delete"):
            await db_client.delete_record(collection=self.collection, record_id=item_id, db_path=self._db_path)


class PocketBasePantryRepository:
    """pantry_items collection served by a PocketBase instance over HTTP.

    The SDK is synchronous, so each call runs in a worker thread.
    """

    collection = constants.PANTRY_TABLE

    def __init__(self, client: PocketBase) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "PocketBasePantryRepository":
        return cls(PocketBase(app_settings.pocketbase_url))

    async def _call(self, operation: str, func: Any, *args: Any, **kwargs: Any) -> Any:
        """Run a blocking SDK call off the event loop, normalizing its errors."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (ClientResponseError, httpx.HTTPError) as e:
            logger.error(f"{operation}_failed", extra={"collection": self.collection, "error": str(e)})
            msg = f"PocketBase {operation} on {self.collection} failed: {e}"
            raise RemoteOperationError(msg, operation=operation) from e

    @staticmethod
    def _record_to_row(record: Any) -> dict[str, Any]:
        row = dict(record.__dict__)
        # Older collections may only carry PocketBase's own "created" timestamp
        if not row.get("created_at"):
            row["created_at"] = row.get("created")
        return row

    async def fetch_all(self) -> list[PantryItem]:
        with span("pantry_repository.pocketbase.fetch_all"):
            records = await self._call(
                "fetch_all",
                self._client.collection(self.collection).get_full_list,
                query_params={"sort": constants.POCKETBASE_FETCH_SORT},
            )
            return [_to_item(self._record_to_row(record), operation="fetch_all") for record in records]

    async def create(self, payload: PantryItemCreate) -> PantryItem:
        with span("pantry_repository.pocketbase.create"):
            record = await self._call(
                "create",
                self._client.collection(self.collection).create,
                payload.model_dump(mode="json"),
            )
            return _to_item(self._record_to_row(record), operation="create")

    async def update_status(self, item_id: str, status: PantryItemStatus) -> None:
        with span("pantry_repository.pocketbase.update_status"):
            update = PantryItemStatusUpdate(status=status)
            await self._call(
                "update_status",
                self._client.collection(self.collection).update,
                item_id,
                update.model_dump(mode="json"),
            )

    async def delete(self, item_id: str) -> None:
        with span("pantry_repository.pocketbase.delete"):
            await self._call("delete", self._client.collection(self.collection).delete, item_id)


def build_repository(app_settings: Settings | None = None) -> PantryRepository:
    """Build the repository selected by ``pantry_backend``."""
    config = app_settings or settings
    if config.pantry_backend == "pocketbase":
        logger.info("Using PocketBase pantry backend", extra={"url": config.pocketbase_url})
        return PocketBasePantryRepository.from_settings(config)

    logger.info("Using SQLite pantry backend", extra={"db_path": config.sqlite_db_path})
    return SQLitePantryRepository(db_path=config.sqlite_db_path)
