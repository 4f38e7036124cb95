"""MongoDB persistence implementations."""

from identity_docstore.infrastructure.persistence.mongodb.document_store import (
    MongoDocumentSession,
    MongoDocumentStore,
)

__all__ = [
    "MongoDocumentSession",
    "MongoDocumentStore",
]
