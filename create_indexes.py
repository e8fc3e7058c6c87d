"""
Script to create document-store indexes used by the gateway's ownership lookups.
Run this once per environment.
"""
import asyncio
import logging

from filegate.core.config import settings
from filegate.core.database import db
from filegate.core.logging import configure_logging

logger = logging.getLogger("create_indexes")


async def create_indexes():
    logger.info("Creating document store indexes...")

    db.connect()
    if db.db is None:
        logger.error("MONGO_URI is not configured, nothing to do")
        return

    try:
        # Delete-path fallback looks documents up by key
        await db.db.documents.create_index("file_key", unique=True)
        logger.info("Created unique index on documents.file_key")

        await db.db.documents.create_index("uploaded_by")
        logger.info("Created index on documents.uploaded_by")

        # Admin check on the sign path
        await db.db.users.create_index("id", unique=True)
        logger.info("Created unique index on users.id")

        logger.info("All indexes created successfully")
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(create_indexes())
