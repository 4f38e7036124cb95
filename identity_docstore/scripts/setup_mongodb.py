#!/usr/bin/env python3
"""
MongoDB initialization script for the identity store.

Creates collections and indexes used by the document user store.

Usage:
    identity-docstore-setup-mongodb [--env-file .env] [--database identity]
"""

import argparse
import asyncio
import sys
from typing import Any, List, Optional

import structlog
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import CollectionInvalid

from identity_docstore.domain.user.core.entities.email_records import (
    UserEmailConfirmation,
    UserEmailRecord,
)
from identity_docstore.domain.user.core.entities.user import IdentityUser
from identity_docstore.infrastructure.config import get_mongodb_database, get_mongodb_uri
from identity_docstore.infrastructure.logging_config import configure_logging
from identity_docstore.infrastructure.persistence.mongodb.document_store import (
    INDEXES,
    MongoDocumentStore,
)

logger = structlog.get_logger(__name__)

COLLECTIONS = [
    IdentityUser.COLLECTION_NAME,
    UserEmailRecord.COLLECTION_NAME,
    UserEmailConfirmation.COLLECTION_NAME,
]


async def create_collections(db: "AsyncIOMotorDatabase[dict[str, Any]]") -> None:
    """Create identity collections."""
    for collection_name in COLLECTIONS:
        try:
            await db.create_collection(collection_name)
            logger.info("collection.created", collection=collection_name)
        except CollectionInvalid:
            logger.info("collection.exists", collection=collection_name)


async def verify_indexes(db: "AsyncIOMotorDatabase[dict[str, Any]]") -> bool:
    """Verify all indexes were created successfully."""
    ok = True
    for collection, _keys, name in INDEXES:
        existing = await db[collection].index_information()
        if name in existing:
            logger.info("index.verified", collection=collection, index=name)
        else:
            logger.error("index.missing", collection=collection, index=name)
            ok = False
    return ok


async def main(argv: Optional[List[str]] = None) -> int:
    """Main setup function."""
    parser = argparse.ArgumentParser(description="Create identity store collections and indexes")
    parser.add_argument("--env-file", default=".env", help="dotenv file to load")
    parser.add_argument("--database", default=None, help="database name override")
    args = parser.parse_args(argv)

    load_dotenv(args.env_file)
    configure_logging()

    mongodb_uri = get_mongodb_uri()
    if not mongodb_uri:
        logger.error("setup.failed", reason="MONGODB_URI not configured")
        return 1

    database_name = args.database or get_mongodb_database()
    logger.info("setup.starting", database=database_name)

    client: "AsyncIOMotorClient[dict[str, Any]]" = AsyncIOMotorClient(mongodb_uri, tz_aware=True)
    store = MongoDocumentStore(client, database_name=database_name)
    try:
        await client.admin.command("ping")
        logger.info("setup.connected")

        await create_collections(store.database)
        await store.ensure_indexes()

        if not await verify_indexes(store.database):
            return 1

        logger.info("setup.completed")
        return 0
    except Exception as e:
        logger.error("setup.failed", error=str(e))
        return 1
    finally:
        await store.close()


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
