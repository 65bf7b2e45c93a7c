"""Schema for the pantry_items table (code-first approach).

The same table is defined twice: as SQLite DDL for the local backend and as a
PocketBase collection for the HTTP backend.
"""

import logging
from typing import Any

import httpx
from pocketbase import PocketBase
from pocketbase.client import ClientResponseError

from src.core import db_client
from src.core.config import constants, settings
from src.domain.pantry import PantryItemStatus


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [constants.PANTRY_TABLE]

_STATUS_VALUES = [status.value for status in PantryItemStatus]
_STATUS_CHECK = ", ".join(f"'{value}'" for value in _STATUS_VALUES)

SQLITE_SCHEMA = {
    "pantry_items": f"""
        CREATE TABLE IF NOT EXISTS pantry_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'Full' CHECK (status IN ({_STATUS_CHECK})),
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        )
    """,
}

SQLITE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_pantry_items_created_at ON pantry_items (created_at)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create the SQLite tables and indexes if they do not exist (idempotent)."""
    conn = await db_client.get_connection(db_path=db_path)

    for table_name, ddl in SQLITE_SCHEMA.items():
        await conn.execute(ddl)
        logger.debug("Ensured table exists", extra={"table": table_name})

    for index_ddl in SQLITE_INDEXES:
        await conn.execute(index_ddl)

    await conn.commit()
    logger.info("SQLite schema initialized", extra={"db_path": str(db_client.get_db_path(db_path))})


def _get_collection_schema(*, collection_name: str) -> dict[str, Any]:
    """Get the expected PocketBase schema for a collection.

    PocketBase v0.23+ uses 'fields' for field definitions, with field options
    flattened onto the field object.
    """
    schemas = {
        "pantry_items": {
            "name": "pantry_items",
            "type": "base",
            "system": False,
            # Single-user tracker: open list/view/create/update/delete
            "listRule": "",
            "viewRule": "",
            "createRule": "",
            "updateRule": "",
            "deleteRule": "",
            "fields": [
                {"name": "name", "type": "text", "required": True},
                {
                    "name": "status",
                    "type": "select",
                    "required": True,
                    "values": _STATUS_VALUES,
                    "maxSelect": 1,
                },
                {"name": "created_at", "type": "autodate", "onCreate": True, "onUpdate": False},
            ],
            "indexes": ["CREATE INDEX idx_pantry_items_created_at ON pantry_items (created_at)"],
        },
    }
    return schemas[collection_name]


async def _collection_exists(*, client: httpx.AsyncClient, collection_name: str) -> bool:
    """Check if a collection exists in PocketBase."""
    try:
        response = await client.get(f"/api/collections/{collection_name}")
        return response.is_success
    except httpx.HTTPError:
        return False


async def _create_collection(*, client: httpx.AsyncClient, schema: dict[str, Any]) -> None:
    """Create a new collection in PocketBase."""
    response = await client.post("/api/collections", json=schema)
    response.raise_for_status()
    logger.info("Created collection: %s", schema["name"])


def _merge_fields(
    schema: dict[str, Any],
    current: dict[str, Any],
) -> tuple[list[dict[str, Any]], list[str]]:
    """Append desired fields that the existing collection lacks.

    Existing fields (including PocketBase system fields such as id) are kept as-is.

    Returns:
        Tuple of (merged_fields, fields_added).
    """
    existing_fields = current.get("fields", [])
    existing_names = {f["name"] for f in existing_fields}

    fields_added = [f["name"] for f in schema.get("fields", []) if f["name"] not in existing_names]
    merged_fields = existing_fields + [f for f in schema.get("fields", []) if f["name"] in fields_added]
    return merged_fields, fields_added


async def _update_collection(
    *,
    client: httpx.AsyncClient,
    collection_name: str,
    schema: dict[str, Any],
) -> None:
    """Add any missing fields to an existing PocketBase collection."""
    response = await client.get(f"/api/collections/{collection_name}")
    response.raise_for_status()
    current = response.json()

    merged_fields, fields_added = _merge_fields(schema, current)
    if not fields_added:
        logger.info("Collection %s schema is already up to date", collection_name)
        return

    response = await client.patch(f"/api/collections/{collection_name}", json={"fields": merged_fields})
    response.raise_for_status()
    logger.info("Updated collection %s: added %s", collection_name, fields_added)


async def sync_schema(
    pocketbase_url: str | None = None,
    admin_email: str | None = None,
    admin_password: str | None = None,
) -> None:
    """Sync the PocketBase schema with the pantry domain model (idempotent).

    Args:
        pocketbase_url: Optional PocketBase URL. If not provided, uses settings.pocketbase_url.
        admin_email: Superuser email. If not provided, uses settings.pocketbase_admin_email.
        admin_password: Superuser password. If not provided, uses settings.pocketbase_admin_password.
    """
    logger.info("Starting PocketBase schema sync...")

    url = pocketbase_url or settings.pocketbase_url
    email = admin_email or settings.require_credential("pocketbase_admin_email", "PocketBase admin email")
    password = admin_password or settings.require_credential("pocketbase_admin_password", "PocketBase admin password")
    client = PocketBase(url)

    try:
        client.collection("_superusers").auth_with_password(email, password)
        logger.info("Successfully authenticated as admin")
    except ClientResponseError as e:
        logger.error(f"Failed to authenticate as admin: {e}")
        raise

    # Use httpx with the auth token from PocketBase SDK
    async with httpx.AsyncClient(base_url=url, timeout=constants.API_TIMEOUT_SECONDS) as http_client:
        http_client.headers["Authorization"] = f"Bearer {client.auth_store.token}"

        for collection_name in COLLECTIONS:
            schema = _get_collection_schema(collection_name=collection_name)

            if not await _collection_exists(client=http_client, collection_name=collection_name):
                await _create_collection(client=http_client, schema=schema)
            else:
                await _update_collection(
                    client=http_client,
                    collection_name=collection_name,
                    schema=schema,
                )

    logger.info("Schema sync complete")
