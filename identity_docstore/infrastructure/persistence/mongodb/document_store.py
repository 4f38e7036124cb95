"""
MongoDB implementation of the document store.

One collection per entity type, document key stored as ``_id``.

Storage design:
- Collection: users (embedded logins / claims)
- Collection: user_emails (email index, ``_id`` derived from the email)
- Collection: user_email_confirmations (``_id`` derived from user name + email)
- Index on users.user_name (find by name)
- Index on users.logins.login_provider + provider_key (find by login)
- Index on user_emails.user_id
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import DeleteOne, ReplaceOne

from identity_docstore.domain.shared.document_query import DocumentQuery
from identity_docstore.infrastructure.config import (
    get_mongodb_database,
    get_mongodb_uri,
    get_mongodb_use_transactions,
)
from identity_docstore.infrastructure.persistence.unit_of_work import (
    DocumentRef,
    DocumentSessionBase,
    PendingUpsert,
)

logger = structlog.get_logger(__name__)

INCLUDED_FIELD = "__included"

# (collection, keys, index name)
INDEXES: List[Tuple[str, List[Tuple[str, int]], str]] = [
    ("users", [("user_name", 1)], "idx_user_name"),
    (
        "users",
        [("logins.login_provider", 1), ("logins.provider_key", 1)],
        "idx_logins_provider_key",
    ),
    ("user_emails", [("user_id", 1)], "idx_user_id"),
]


class MongoDocumentStore:
    """
    MongoDB implementation of IDocumentStore port.

    Example:
        >>> from motor.motor_asyncio import AsyncIOMotorClient
        >>> client = AsyncIOMotorClient("mongodb://localhost:27017", tz_aware=True)
        >>> store = MongoDocumentStore(client, database_name="identity")
        >>> session = store.open_session()
    """

    def __init__(
        self,
        client: Optional[AsyncIOMotorClient[Dict[str, Any]]] = None,
        database_name: Optional[str] = None,
        use_transactions: Optional[bool] = None,
    ):
        """
        Initialize store with optional client.

        Args:
            client: Motor client (if None, creates new one from config)
            database_name: Database name (if None, read from config)
            use_transactions: Commit inside a transaction (if None, read from config)
        """
        if client is None:
            uri = get_mongodb_uri()
            if not uri:
                raise ValueError(
                    "MONGODB_URI not configured. "
                    "Set MONGODB_URI, MONGODB_USER, "
                    "and MONGODB_PASSWORD environment variables."
                )
            self._client: AsyncIOMotorClient[Dict[str, Any]] = AsyncIOMotorClient(
                uri, tz_aware=True
            )
        else:
            self._client = client

        self._db: AsyncIOMotorDatabase[Dict[str, Any]] = self._client[
            database_name or get_mongodb_database()
        ]
        self._use_transactions = (
            get_mongodb_use_transactions() if use_transactions is None else use_transactions
        )

        logger.info(
            "mongo_document_store.initialized",
            database=self._db.name,
            use_transactions=self._use_transactions,
        )

    @property
    def database(self) -> AsyncIOMotorDatabase[Dict[str, Any]]:
        return self._db

    def open_session(self) -> "MongoDocumentSession":
        return MongoDocumentSession(self._client, self._db, self._use_transactions)

    async def ensure_indexes(self) -> None:
        """Create lookup indexes (idempotent)."""
        for collection, keys, name in INDEXES:
            await self._db[collection].create_index(keys, name=name)
            logger.info("mongo_document_store.index_ready", collection=collection, index=name)

    async def close(self) -> None:
        """Close MongoDB connection."""
        self._client.close()
        logger.info("mongo_document_store.closed")


class MongoDocumentSession(DocumentSessionBase):
    """Document session over a MongoDB database."""

    def __init__(
        self,
        client: AsyncIOMotorClient[Dict[str, Any]],
        db: AsyncIOMotorDatabase[Dict[str, Any]],
        use_transactions: bool = False,
    ) -> None:
        super().__init__()
        self._client = client
        self._db = db
        self._use_transactions = use_transactions

    async def _fetch(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        try:
            return await self._db[collection].find_one({"_id": key})  # type: ignore[no-any-return]
        except Exception as e:
            logger.error("mongo.find_one_failed", collection=collection, key=key, error=str(e))
            raise

    async def _fetch_with_include(
        self, collection: str, key: str, include_collection: str, include_field: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"_id": key}},
            {"$limit": 1},
            {
                "$lookup": {
                    "from": include_collection,
                    "localField": include_field,
                    "foreignField": "_id",
                    "as": INCLUDED_FIELD,
                }
            },
        ]
        try:
            documents = await self._db[collection].aggregate(pipeline).to_list(length=1)
        except Exception as e:
            logger.error("mongo.aggregate_failed", collection=collection, key=key, error=str(e))
            raise

        if not documents:
            return None, None

        document = documents[0]
        included = document.pop(INCLUDED_FIELD, None) or []
        return document, (included[0] if included else None)

    async def _fetch_where(
        self, collection: str, query: DocumentQuery, limit: Optional[int]
    ) -> List[Dict[str, Any]]:
        filter_dict = query.to_filter()
        try:
            cursor = self._db[collection].find(filter_dict)
            if limit is not None:
                cursor = cursor.limit(limit)
            return await cursor.to_list(length=limit)  # type: ignore[no-any-return]
        except Exception as e:
            logger.error(
                "mongo.find_failed", collection=collection, filter=filter_dict, error=str(e)
            )
            raise

    async def _flush(self, upserts: List[PendingUpsert], deletes: List[DocumentRef]) -> None:
        operations: Dict[str, List[Any]] = {}
        for collection, key, document in upserts:
            operations.setdefault(collection, []).append(
                ReplaceOne({"_id": key}, document, upsert=True)
            )
        for collection, key in deletes:
            operations.setdefault(collection, []).append(DeleteOne({"_id": key}))

        try:
            if self._use_transactions:
                async with await self._client.start_session() as session:
                    async with session.start_transaction():
                        for collection, ops in operations.items():
                            await self._db[collection].bulk_write(
                                ops, ordered=True, session=session
                            )
            else:
                for collection, ops in operations.items():
                    await self._db[collection].bulk_write(ops, ordered=True)
        except Exception as e:
            logger.error(
                "mongo.bulk_write_failed",
                collections=sorted(operations),
                transactional=self._use_transactions,
                error=str(e),
            )
            raise
