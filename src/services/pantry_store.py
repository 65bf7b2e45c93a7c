"""In-memory pantry state kept in step with the remote store.

Status changes and deletes are applied locally first and then sent to the
store. A failed remote call is logged and the local change stays in place;
the next fetch_all() brings local state back in line with the store.
"""

import logging

from src.core.config import Settings, settings
from src.core.errors import RemoteOperationError, classify_remote_error
from src.core.logging import configure_logfire, log_with_context, span
from src.core.schema import init_db
from src.domain.create_models import PantryItemCreate
from src.domain.pantry import PantryItem, PantryItemStatus
from src.services.pantry_lifecycle import advance_status, derive_display_order
from src.services.pantry_repository import PantryRepository, build_repository


logger = logging.getLogger(__name__)


class PantryStore:
    """Owns the local pantry collection and syncs it with a PantryRepository."""

    def __init__(self, repository: PantryRepository) -> None:
        self._repository = repository
        self._items: list[PantryItem] = []
        self.loading = False
        self.last_error: str | None = None

    @property
    def items(self) -> list[PantryItem]:
        """Items in fetch order (newest first, plus local additions at the front)."""
        return list(self._items)

    @property
    def display_items(self) -> list[PantryItem]:
        """Items in display order, Out of Stock last."""
        return derive_display_order(self._items)

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def get_item(self, item_id: str) -> PantryItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def _record_failure(self, message: str, error: RemoteOperationError, *, item_id: str | None = None) -> None:
        response = classify_remote_error(error)
        self.last_error = error.message
        log_with_context(
            logger,
            "error",
            f"{message}: {error.message}",
            operation=error.operation,
            item_id=item_id,
            error=error.message,
            error_code=response.code,
            severity=response.severity.value,
        )

    async def fetch_all(self) -> bool:
        """Replace the local collection with the store's contents.

        On failure the previous collection is kept.

        Returns:
            True if the collection was refreshed
        """
        with span("pantry_store.fetch_all"):
            self.loading = True
            try:
                items = await self._repository.fetch_all()
            except RemoteOperationError as e:
                self._record_failure("Error fetching", e)
                return False
            finally:
                self.loading = False

            self._items = items
            self.last_error = None
            logger.debug(f"Fetched {len(items)} pantry items")
            return True

    async def create(self, name: str) -> PantryItem | None:
        """Add an item with status Full.

        Blank names are ignored without contacting the store. The item only
        appears locally once the store has returned it.

        Args:
            name: Item name, stored as entered

        Returns:
            The stored item, or None if nothing was added
        """
        if not name.strip():
            return None

        with span("pantry_store.create"):
            payload = PantryItemCreate(name=name, status=PantryItemStatus.FULL)
            try:
                item = await self._repository.create(payload)
            except RemoteOperationError as e:
                self._record_failure("Error adding", e)
                return None

            # An overlapping fetch_all may already have loaded this row
            self._items = [item, *(existing for existing in self._items if existing.id != item.id)]
            self.last_error = None
            logger.info(f"Added pantry item: {item.name}", extra={"item_id": item.id})
            return item

    async def set_status(self, item_id: str, status: PantryItemStatus) -> None:
        """Set an item's status locally, then in the store.

        Values outside PantryItemStatus are ignored. The local change is not
        rolled back if the store update fails.
        """
        try:
            status = PantryItemStatus(status)
        except ValueError:
            logger.warning(
                "Ignoring unknown pantry item status", extra={"item_id": item_id, "status": str(status)}
            )
            return

        with span("pantry_store.set_status"):
            self._items = [
                item.model_copy(update={"status": status}) if item.id == item_id else item for item in self._items
            ]

            try:
                await self._repository.update_status(item_id, status)
            except RemoteOperationError as e:
                self._record_failure("Error updating", e, item_id=item_id)
                return

            self.last_error = None
            logger.info(f"Updated pantry item status: {item_id} -> {status}", extra={"item_id": item_id})

    async def cycle_status(self, item_id: str) -> PantryItemStatus | None:
        """Move an item to the next stock level.

        Returns:
            The new status, or None if the item is not in the local collection
        """
        item = self.get_item(item_id)
        if item is None:
            logger.warning("Cannot cycle status of unknown pantry item", extra={"item_id": item_id})
            return None

        next_status = advance_status(item.status)
        await self.set_status(item_id, next_status)
        return next_status

    async def delete(self, item_id: str) -> None:
        """Remove an item locally, then from the store.

        The local removal is not rolled back if the store delete fails.
        """
        with span("pantry_store.delete"):
            self._items = [item for item in self._items if item.id != item_id]

            try:
                await self._repository.delete(item_id)
            except RemoteOperationError as e:
                self._record_failure("Error deleting", e, item_id=item_id)
                return

            self.last_error = None
            logger.info("Deleted pantry item", extra={"item_id": item_id})


async def open_pantry_store(app_settings: Settings | None = None) -> PantryStore:
    """Configure logging, prepare the configured backend and load the pantry."""
    config = app_settings or settings
    configure_logfire(config)

    if config.pantry_backend == "sqlite":
        await init_db(db_path=config.sqlite_db_path)

    store = PantryStore(build_repository(config))
    await store.fetch_all()
    return store
