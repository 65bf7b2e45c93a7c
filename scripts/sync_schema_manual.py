#!/usr/bin/env python3
"""Create or update the pantry_items table for the configured backend."""

import asyncio
import logging

from src.core.config import settings
from src.core.db_client import close_connection
from src.core.schema import init_db, sync_schema


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main() -> None:
    if settings.pantry_backend == "sqlite":
        await init_db(db_path=settings.sqlite_db_path)
        await close_connection(db_path=settings.sqlite_db_path)
        logger.info(f"SQLite schema ready at {settings.sqlite_db_path}")
        return

    # Ensure credentials are present
    admin_email = settings.require_credential("pocketbase_admin_email", "PocketBase Admin Email")
    admin_password = settings.require_credential("pocketbase_admin_password", "PocketBase Admin Password")

    await sync_schema(
        admin_email=admin_email,
        admin_password=admin_password,
    )


if __name__ == "__main__":
    asyncio.run(main())
